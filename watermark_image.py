"""
Watermark CLI

Stamps a watermark image (usually a PNG with transparency) onto a photo,
once at a corner/center or tiled over the whole picture.

Usage:
  python watermark_image.py --image photo.jpg --watermark logo.png --output out.jpg
  python watermark_image.py --image photos/ --watermark logo.png --output marked/ --tile
  python watermark_image.py --image https://example.com/a.jpg --position top-left --format PNG

Defaults come from configs/defaults.json, configs/settings.json and
environment variables (a .env file is honoured); flags win over all of them.
"""
import os
import sys
import logging
import argparse
from typing import Any, Dict

from dotenv import load_dotenv

from config_loader import load_config, merge_dict
from watermarker import codec
from watermarker.pipeline import process_directory, watermark_image

logger = logging.getLogger("watermark_image")

# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------

def _log_level(name: str) -> int:
    return getattr(logging, (name or "INFO").upper(), logging.INFO)

def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    wm: Dict[str, Any] = {}
    if args.watermark is not None:
        wm["file"] = args.watermark
    if args.position is not None:
        wm["position"] = args.position
    if args.opacity is not None:
        wm["opacity"] = args.opacity
    if args.padding_x is not None:
        wm["padding_x"] = args.padding_x
    if args.padding_y is not None:
        wm["padding_y"] = args.padding_y
    if args.tile is not None:
        wm["tile"] = args.tile
    if args.spacing is not None:
        wm["spacing"] = args.spacing

    out: Dict[str, Any] = {}
    if args.format is not None:
        out["format"] = args.format
    if args.quality is not None:
        out["quality"] = args.quality

    return {"watermark": wm, "output": out}

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Agrega una marca de agua a una imagen o a una carpeta de imágenes.")
    parser.add_argument("--image", help="Ruta a una imagen, carpeta de imágenes o URL http(s)")
    parser.add_argument("--watermark", help="Ruta a la marca de agua (sobrescribe watermark.file)")
    parser.add_argument("--output", help="Archivo de salida, o carpeta de salida si --image es una carpeta",
                        default="output.jpg")
    parser.add_argument("--position",
                        help="center, top-left, top-right, bottom-left o bottom-right")
    parser.add_argument("--opacity", type=float, help="Opacidad de la marca de agua (0.0-1.0)")
    parser.add_argument("--padding-x", type=int, help="Margen horizontal en px desde el borde")
    parser.add_argument("--padding-y", type=int, help="Margen vertical en px desde el borde")
    parser.add_argument("--tile", action=argparse.BooleanOptionalAction, default=None,
                        help="Repetir la marca de agua en mosaico (--no-tile la desactiva)")
    parser.add_argument("--spacing", type=int, help="Separación entre mosaicos en px")
    parser.add_argument("--format", help="Formato de salida (JPEG o PNG)")
    parser.add_argument("--quality", type=int, help="Calidad JPEG (1-100)")
    parser.add_argument("--defaults", help="Ruta a defaults.json", default="configs/defaults.json")
    parser.add_argument("--settings", help="Ruta a settings.json", default="configs/settings.json")
    parser.add_argument("--log", help="Nivel de log (DEBUG, INFO, WARNING, ERROR)")
    return parser

# ------------------------------------------------------------------------------
# CLI
# ------------------------------------------------------------------------------
def main(argv=None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=_log_level(args.log),
                        format="%(asctime)s %(levelname)s %(name)s %(message)s")

    cfg = load_config(defaults_path=args.defaults, settings_path=args.settings)
    cfg = merge_dict(cfg, _cli_overrides(args))
    if not args.log:
        logging.getLogger().setLevel(_log_level((cfg.get("logging", {}) or {}).get("level")))

    if not args.image:
        parser.error("Debes especificar --image")

    wm_path = (cfg.get("watermark", {}) or {}).get("file")
    if not wm_path:
        parser.error("Falta la marca de agua (--watermark o watermark.file)")

    try:
        watermark = codec.load_image(wm_path)

        if os.path.isdir(args.image):
            written = process_directory(args.image, args.output, watermark, cfg)
            print(f"Procesadas {len(written)} imagen(es) en {args.output}")
            return 0

        base = codec.load_image(args.image)
        result = watermark_image(base, watermark, cfg)

        out_cfg = cfg.get("output", {}) or {}
        fmt = out_cfg.get("format") or "JPEG"
        # codificar primero: si falla no queda un archivo vacío
        out_bytes = codec.encode(result, fmt, int(out_cfg.get("quality", codec.DEFAULT_JPEG_QUALITY)))
        with open(args.output, "wb") as f:
            f.write(out_bytes)
    except (OSError, ValueError) as e:
        logger.error("Error al aplicar la marca de agua: %s", e)
        return 1

    print(f"Imagen con marca de agua guardada en {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
