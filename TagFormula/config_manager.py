# config_manager.py
import json
from pathlib import Path

config_json = Path(__file__).resolve().parent.parent / "config.json"
ui_strings = Path(__file__).resolve().parent.parent / "ui_strings.json"



def _read_json(path):
    try:
        with open(path, 'r', encoding= 'utf-8') as f:
            return json.load(f)

    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def load_setting_value(key_value, default=0):
    """Return one setting from config.json, or the whole dict for "all".

    A missing or corrupt file behaves like an empty one, so callers get
    `default` back instead of an exception.
    """
    settings_dict = _read_json(config_json)

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, default)


def load_setting_description(key_value):
    settings_dict = _read_json(ui_strings)

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, "")




def save_setting(settings_dict):
    try:
        with open (config_json, 'w', encoding= 'utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except (OSError, TypeError):
        return{}
