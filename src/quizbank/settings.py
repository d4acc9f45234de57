"""User settings stored next to the progress document."""
from quizbank.db import init_db, read_value, write_value
from quizbank.models import FilterConfig, KINDS, MODES, TYPE_ALL


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    value = read_value(db_path, key)
    return default if value is None else value


def set_setting(db_path: str, key: str, value: str) -> None:
    write_value(db_path, key, value)


def load_filters(db_path: str) -> FilterConfig:
    """Last-used filters, falling back to defaults for anything unrecognised."""
    defaults = FilterConfig()
    init_db(db_path)
    type_filter = get_setting(db_path, "filter_type", defaults.type_filter)
    if type_filter != TYPE_ALL and type_filter not in KINDS:
        type_filter = defaults.type_filter
    mode = get_setting(db_path, "filter_mode", defaults.mode)
    if mode not in MODES:
        mode = defaults.mode
    shuffle = get_setting(db_path, "filter_shuffle", "1" if defaults.shuffle else "0") != "0"
    return FilterConfig(type_filter=type_filter, mode=mode, shuffle=shuffle)


def save_filters(db_path: str, filters: FilterConfig) -> None:
    init_db(db_path)
    set_setting(db_path, "filter_type", filters.type_filter)
    set_setting(db_path, "filter_mode", filters.mode)
    set_setting(db_path, "filter_shuffle", "1" if filters.shuffle else "0")
