# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Optional

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from markban import configuration


class ConfigurationRepository:
    def __init__(self) -> None:
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        self._config = load(configuration.APP_CONFIG_PATH.read_text(), Loader=Loader)

        if self._config is None:
            self._config = configuration.default_configuration()
            self.is_dirty = True
            return

        # Fill in settings added since the file was written
        for key, value in configuration.default_configuration().items():
            if key not in self._config:
                self._config[key] = value  # type: ignore[literal-required]
                self.is_dirty = True

    def __save_data(self, config: configuration.Configuration) -> None:
        configuration.APP_CONFIG_PATH.write_text(
            dump(config, Dumper=Dumper, sort_keys=False)
        )

    def flush(self) -> None:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(
        self,
        author: Optional[str] = None,
        remove_author: bool = False,
        columns: Optional[list[str]] = None,
        show_due: Optional[bool] = None,
        date_format: Optional[str] = None,
    ) -> None:
        self.is_dirty = True

        if author is not None:
            self.config["author"] = author
        if remove_author:
            self.config["author"] = None
        if columns is not None:
            self.config["columns"] = columns
        if show_due is not None:
            self.config["show_due"] = show_due
        if date_format is not None:
            self.config["date_format"] = date_format


CONFIGURATION_REPO = ConfigurationRepository()
