# config_manager.py
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

config_json = Path(__file__).resolve().parent.parent / "config.json"


DEFAULT_SETTINGS = {
    "decimal_places": 6,
    "max_fraction_digits": 10,
    "max_denominator": 10000,
    "suggest_finite_base": True,
    "copy_result_to_clipboard": False,
    "debug": False,
}


def load_setting_value(key_value, path=None):
    """Return one setting, or the whole settings dict for key_value == "all".

    Values missing from config.json (or a missing/broken file) fall back to DEFAULT_SETTINGS.
    """
    settings_dict = dict(DEFAULT_SETTINGS)
    config_path = path or config_json
    try:
        with open(config_path, 'r', encoding= 'utf-8') as f:
            settings_dict.update(json.load(f))

    except FileNotFoundError:
        logger.debug("No config file at %s, using defaults", config_path)

    except json.JSONDecodeError as e:
        logger.warning("Ignoring broken config file %s: %s", config_path, e)


    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def merge_settings(overrides=None):
    """Defaults updated with overrides; loads config.json when overrides is None."""
    if overrides is None:
        return load_setting_value("all")
    settings_dict = dict(DEFAULT_SETTINGS)
    settings_dict.update(overrides)
    return settings_dict
