# config_loader.py
import os
import json
import logging

logger = logging.getLogger("config_loader")

# env var -> (section, key, type)
ENV_OVERRIDES = {
    "WATERMARK_FILE": ("watermark", "file", str),
    "WATERMARK_POSITION": ("watermark", "position", str),
    "WATERMARK_OPACITY": ("watermark", "opacity", float),
    "WATERMARK_PADDING_X": ("watermark", "padding_x", int),
    "WATERMARK_PADDING_Y": ("watermark", "padding_y", int),
    "WATERMARK_TILE": ("watermark", "tile", "bool"),
    "WATERMARK_SPACING": ("watermark", "spacing", int),
    "OUTPUT_FORMAT": ("output", "format", str),
    "JPEG_QUALITY": ("output", "quality", int),
    "LOG_LEVEL": ("logging", "level", str),
}

def load_json(path):
    """Carga un archivo JSON y devuelve un dict."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)

def merge_dict(base, override):
    """
    Mezcla dos diccionarios de forma recursiva.
    - base: dict original
    - override: dict con valores que sobrescriben
    """
    result = base.copy()
    for k, v in override.items():
        if isinstance(v, dict) and k in result and isinstance(result[k], dict):
            result[k] = merge_dict(result[k], v)
        else:
            result[k] = v
    return result

def _parse_bool(value):
    return str(value).strip().lower() in ("1", "true", "yes", "on")

def apply_env_overrides(config, environ=None):
    """
    Reemplaza valores de config con variables de entorno si existen.
    Ejemplo:
      WATERMARK_OPACITY=0.3 -> config["watermark"]["opacity"] = 0.3
    Los valores que no se pueden convertir se ignoran con un warning.
    """
    environ = os.environ if environ is None else environ
    for var, (section, key, kind) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            value = _parse_bool(raw) if kind == "bool" else kind(raw)
        except ValueError:
            logger.warning("Ignorando %s=%r: no es un %s válido", var, raw, getattr(kind, "__name__", kind))
            continue
        config.setdefault(section, {})[key] = value
    return config

def load_config(defaults_path="configs/defaults.json", settings_path="configs/settings.json", environ=None):
    """
    Carga la configuración completa:
      1. defaults.json (si existe)
      2. settings.json (si existe)
      3. variables de entorno
    Los archivos que existen pero no se pueden leer se saltan con un warning.
    """
    config = {}
    for path in (defaults_path, settings_path):
        if not path or not os.path.exists(path):
            continue
        try:
            config = merge_dict(config, load_json(path))
        except (OSError, ValueError) as e:
            logger.warning("No se pudo cargar %s: %s", path, e)

    config = apply_env_overrides(config, environ)
    return config
