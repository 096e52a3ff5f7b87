from pydantic import parse_file_as

from waterdrop.models import Config, InputConfig


def create_conf(path: str) -> Config:
    """Generates the run config from the operator's config file"""
    base_config = parse_file_as(InputConfig, path)

    return Config(
        date=Config.date_label(base_config.start_time, base_config.end_time),
        **base_config.dict(),
    )


def load_conf(report_path: str) -> Config:
    """Loads the config saved alongside an existing report"""
    return parse_file_as(Config, path=f"{report_path}/config.json")
