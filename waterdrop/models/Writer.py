import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel

from waterdrop.models.Config import Config


@dataclass
class Writer:
    config: Config
    root: str = "reports"

    @property
    def path(self) -> str:
        return f"{self.root}/{self.config.date}"

    @property
    def csv_path(self) -> str:
        return f"{self.path}/csv"

    @property
    def json_path(self) -> str:
        return f"{self.path}/json"

    @staticmethod
    def serializable(data: Any) -> Any:
        """Models go through pydantic's encoder so Decimals survive as strings"""
        if isinstance(data, BaseModel):
            return json.loads(data.json())
        if isinstance(data, list):
            return [Writer.serializable(d) for d in data]
        return data

    @staticmethod
    def write_csv(rows: Iterable[dict], path: str, fieldnames: list[str]) -> None:
        with open(path, "w+", newline="") as f:
            writer = csv.DictWriter(
                f, delimiter=",", fieldnames=fieldnames, extrasaction="ignore"
            )
            writer.writeheader()
            writer.writerows(rows)

    # create the directory in the reports folder for csv and json if it doesn't exist
    def _create_dir(self) -> None:
        Path(self.csv_path).mkdir(parents=True, exist_ok=True)
        Path(self.json_path).mkdir(parents=True, exist_ok=True)

    def to_csv(self, rows: list[dict], name: str, fieldnames: list[str]) -> str:
        self._create_dir()
        path = f"{self.csv_path}/{name}.csv"
        self.write_csv(rows, path, fieldnames)
        return path

    def to_json(self, data: Any, name: str) -> str:
        self._create_dir()
        path = f"{self.json_path}/{name}.json"
        with open(path, "w") as f:
            json.dump(self.serializable(data), f, indent=4)
        return path

    def to_csv_and_json(self, data: list[Any], rows: list[dict], name: str) -> None:
        """
        Writes the full models as json and the display rows as csv.
        Header comes from the first row, an empty list yields an empty file.
        """
        fieldnames = list(rows[0].keys()) if len(rows) > 0 else []
        self.to_json(data, name)
        self.to_csv(rows, name, fieldnames)
