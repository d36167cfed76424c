"""Define a configuration class for termpix."""

from __future__ import annotations

import argparse
import json
import logging
import os
from ast import literal_eval
from pathlib import Path
from typing import TYPE_CHECKING, Any

import fastjsonschema
from platformdirs import user_config_dir

from termpix import __app_name__, __copyright__

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from typing import ClassVar


log = logging.getLogger(__name__)

_SCHEMA_TYPES: dict[type | Callable, str] = {
    bool: "boolean",
    str: "string",
    int: "integer",
    float: "number",
    Path: "string",
}


class BooleanOptionalAction(argparse.Action):
    """Action for boolean flags which adds a ``--no-`` prefixed negative flag."""

    def __init__(self, option_strings: list[str], *args: Any, **kwargs: Any) -> None:
        """Add a negative flag for each long flag."""
        negated = [
            f"--no-{option_string[2:]}"
            for option_string in option_strings
            if option_string.startswith("--")
        ]
        kwargs["nargs"] = 0
        super().__init__([*option_strings, *negated], *args, **kwargs)

    def format_usage(self) -> str:
        """Format the action string."""
        return " | ".join(self.option_strings)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: str | Sequence[Any] | None,
        option_string: str | None = None,
    ) -> None:
        """Set the value to True or False depending on the flag provided."""
        if option_string in self.option_strings:
            assert isinstance(option_string, str)
            setattr(namespace, self.dest, not option_string.startswith("--no-"))


TYPE_ACTIONS: dict[Callable[[Any], Any], type[argparse.Action]] = {
    bool: BooleanOptionalAction
}


class PathEncoder(json.JSONEncoder):
    """JSON encoder which encodes paths as strings."""

    def default(self, o: Any) -> Any:
        """Encode paths as strings, deferring anything else to the base encoder."""
        if isinstance(o, Path):
            return str(o)
        return super().default(o)


_json_encoder = PathEncoder()


class Setting:
    """A single configuration item.

    A setting knows its default value, how to parse it from the command line, and
    the JSON schema its values must satisfy.
    """

    def __init__(
        self,
        name: str,
        default: Any = None,
        help_: str = "",
        type_: Callable[[Any], Any] | None = None,
        choices: list[Any] | None = None,
        action: type[argparse.Action] | str | None = None,
        flags: list[str] | None = None,
        schema: dict[str, Any] | None = None,
        nargs: str | int | None = None,
        hidden: bool = False,
        **kwargs: Any,
    ) -> None:
        """Create a new configuration item."""
        self.name = name
        self.default = default
        self.help = help_
        self.type = type_ or type(default)
        self.choices = choices
        self.action = action or TYPE_ACTIONS.get(self.type)
        self.flags = flags or [f"--{name.replace('_', '-')}"]
        self.nargs = nargs
        self.hidden = hidden
        self.kwargs = kwargs
        self._schema = {"type": _SCHEMA_TYPES.get(self.type), **(schema or {})}

    @property
    def schema(self) -> dict[str, Any]:
        """The JSON schema property for the setting's values."""
        schema = {"description": self.help, **self._schema}
        if self.choices:
            if "items" in schema:
                schema["items"] = {**schema["items"], "enum": self.choices}
            else:
                schema["enum"] = self.choices
        return schema

    @property
    def parser_args(self) -> tuple[list[str], dict[str, Any]]:
        """Arguments for :py:meth:`argparse.ArgumentParser.add_argument`."""
        # No defaults are given, so unset flags do not override other sources
        kwargs: dict[str, Any] = {
            "action": self.action,
            "help": argparse.SUPPRESS if self.hidden else self.help,
        }
        if self.nargs:
            kwargs["nargs"] = self.nargs
        if self.action != "version":
            kwargs["type"] = self.type
        if self.choices:
            kwargs["choices"] = self.choices
        for key in ("version", "metavar"):
            if key in self.kwargs:
                kwargs[key] = self.kwargs[key]
        return self.flags, kwargs

    def cast(self, value: Any) -> Any:
        """Convert a value, or each item of a list, to the setting's type.

        Values which cannot be converted are returned unchanged, to be rejected
        during validation.
        """
        if isinstance(value, list):
            return [self.cast(item) for item in value]
        if value is None:
            return value
        try:
            return self.type(value)
        except (ValueError, TypeError):
            return value

    def __repr__(self) -> str:
        """Represent a :py:class`Setting` instance as a string."""
        return f"<Setting {self.name}={self.default!r}>"


class Config:
    """A configuration store.

    Values are taken from the setting defaults, then the user's configuration file,
    environment variables and the command line, each overriding the last.
    """

    _conf_file_name = "config.json"
    _settings: ClassVar[dict[str, Setting]] = {}

    def __init__(self, _help: str = "", **kwargs: Any) -> None:
        """Create a new configuration, overriding defaults with keyword arguments."""
        # Ensure all settings are registered
        from termpix import _settings  # noqa: F401

        self._help = _help
        self._config_file_path = (
            Path(user_config_dir(__app_name__, appauthor=None)) / self._conf_file_name
        )
        self._schema_validate = fastjsonschema.compile(self.schema, use_default=False)
        self._values = {
            **{name: setting.default for name, setting in self._settings.items()},
            **kwargs,
        }

    def load(self, args: Sequence[str] | None = None) -> None:
        """Load the configuration options from non-local sources.

        Args:
            args: Command line arguments to parse. Defaults to :py:data:`sys.argv`

        """
        from termpix.log import BufferedLogs, setup_logs

        # Buffer logs and replay them after settings are configured
        with BufferedLogs(logger=log):
            try:
                for source, values in (
                    ("config file", self._load_file),
                    ("environment variable", self._load_env),
                    ("command line parameter", lambda: self._load_args(args)),
                ):
                    self._values.update(self._validate(values(), source))
            finally:
                # Set-up logs even if configuration validation fails
                setup_logs(self)

    def _validate(self, data: dict[str, Any], source: str) -> dict[str, Any]:
        """Drop unknown or invalid settings from a set of values, with a warning."""
        validated = {}
        for name, value in data.items():
            if name not in self._settings:
                log.warning(
                    "Configuration option '%s' not recognised in %s", name, source
                )
                continue
            # Convert to json and back to attain json types
            json_data = json.loads(_json_encoder.encode({name: value}))
            try:
                self._schema_validate(json_data)
            except fastjsonschema.JsonSchemaValueException as error:
                log.warning(
                    "Error in %s setting: `%s = %r`\n%s",
                    source,
                    name,
                    value,
                    error.message.replace("data.", ""),
                )
            else:
                validated[name] = value
        return validated

    @property
    def schema(self) -> dict[str, Any]:
        """A JSON schema describing every setting."""
        return {
            "title": "Termpix Configuration",
            "description": "A configuration for termpix",
            "type": "object",
            "properties": {name: item.schema for name, item in self._settings.items()},
        }

    def _load_args(self, args: Sequence[str] | None = None) -> dict[str, Any]:
        """Load settings from command line flags."""
        parser = argparse.ArgumentParser(
            prog=__app_name__,
            description=self._help,
            epilog=__copyright__,
            argument_default=argparse.SUPPRESS,
        )
        for setting in self._settings.values():
            flags, kwargs = setting.parser_args
            parser.add_argument(*flags, **kwargs)
        namespace, remainder = parser.parse_known_intermixed_args(args)
        if remainder:
            log.warning("Unrecognised command line arguments: %s", " ".join(remainder))
        return vars(namespace)

    def _load_env(self) -> dict[str, Any]:
        """Load settings from ``TERMPIX_<NAME>`` environment variables."""
        result = {}
        for name, setting in self._settings.items():
            env = f"{__app_name__}_{name}".upper()
            if (value := os.environ.get(env)) is None:
                continue
            # Attempt to parse the value as a literal
            parsed: Any = value
            if value:
                try:
                    parsed = literal_eval(value)
                except (
                    ValueError,
                    TypeError,
                    SyntaxError,
                    MemoryError,
                    RecursionError,
                ):
                    pass
            result[name] = setting.cast(parsed)
        return result

    def _load_file(self) -> dict[str, Any]:
        """Load settings from the user's JSON configuration file."""
        if not self._config_file_path.exists():
            return {}
        with self._config_file_path.open() as f:
            try:
                data = json.load(f)
            except json.decoder.JSONDecodeError:
                log.error(
                    "Could not parse the configuration file: %s\nIs it valid json?",
                    self._config_file_path,
                )
                return {}
        if not isinstance(data, dict):
            log.error(
                "The configuration file must contain a JSON object: %s",
                self._config_file_path,
            )
            return {}
        results = {}
        for name, value in data.items():
            if (setting := self._settings.get(name)) is not None:
                value = setting.cast(value)
            results[name] = value
        return results

    def __getattr__(self, name: str) -> Any:
        """Enable access of settings via dotted attributes."""
        values = self.__dict__.get("_values", {})
        if name in values:
            return values[name]
        raise AttributeError(f"'{type(self).__name__}' has no setting '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        """Set a setting's value, or an ordinary attribute."""
        if name in self._settings:
            self._values[name] = value
        else:
            super().__setattr__(name, value)

    @classmethod
    def add_setting(cls, name: str, *args: Any, **kwargs: Any) -> None:
        """Register a new setting."""
        cls._settings[name] = Setting(name, *args, **kwargs)


add_setting = Config.add_setting
