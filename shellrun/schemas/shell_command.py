"""
ShellCommand schema - the declarative description of one run.

A ShellCommand names one or more input files, the shell commands to run over
them, where each produced file should go, and which endpoints to notify when
the run finishes (regardless of success or failure).

    ShellCommand:
      inputs:
        duck:  http://www.input.com/duck.jpg
        goose: http://www.input.com/goose.jpg
      outputs:
        duckLarge:  s3://www.output.com/duck-1500x1000.jpg
        gooseLarge: http://www.output.com/my/web/service
        dimensions: capture://dimensions
      commands:
        - convert %%inputs.duck%%  -resize 1500x1000 %%outputs.duckLarge%%
        - convert %%inputs.goose%% -resize 1500x1000 %%outputs.gooseLarge%%
        - identify %%inputs.duck%% > %%outputs.dimensions%%
      notifications:
        - http://www.notification.com/receive/webhook/1234
"""

import json
from dataclasses import dataclass, field
from typing import Any

from shellrun.errors import ParseError, ValidationError

# Fixed key order of the serialized form
SERIALIZATION_FIELDS = ("inputs", "commands", "outputs", "notifications", "custom_data")


def _dedupe(values: list[str]) -> list[str]:
    """Drop repeated values, keeping the first occurrence of each."""
    return list(dict.fromkeys(values))


def _check_str_map(key: str, value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        raise ValidationError(f"'{key}' must be an object of name -> URL")
    for name, url in value.items():
        if not isinstance(url, str):
            raise ValidationError(f"'{key}.{name}' must be a string")
    return dict(value)


def _check_str_list(key: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ValidationError(f"'{key}' must be an array of strings")
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise ValidationError(f"'{key}[{i}]' must be a string")
    return list(value)


@dataclass
class ShellCommand:
    """
    Inputs, commands, outputs and notifications for a single run.

    Builder methods return the same object so calls can be chained:

        sc = (ShellCommand.create()
              .add_input("src", "http://example.com/a.png")
              .add_output("thumb", "s3://bucket/a-thumb.png")
              .add_command("convert %%inputs.src%% -resize 64x64 %%outputs.thumb%%"))

    Attributes:
        inputs: Input name -> source URL
        commands: Command templates, run in order
        outputs: Output name -> destination URL
        notifications: Notification URLs, de-duplicated, first-seen order
        custom_data: Opaque value echoed back in the run result
    """
    inputs: dict[str, str] = field(default_factory=dict)
    commands: list[str] = field(default_factory=list)
    outputs: dict[str, str] = field(default_factory=dict)
    notifications: list[str] = field(default_factory=list)
    custom_data: Any = field(default_factory=dict)

    @classmethod
    def create(cls) -> "ShellCommand":
        return cls()

    @classmethod
    def create_from_json(cls, text: str) -> "ShellCommand":
        return cls.create().from_json(text)

    def add_input(self, name: str, url: str) -> "ShellCommand":
        self.inputs[name] = url
        return self

    def get_inputs(self) -> dict[str, str]:
        return dict(self.inputs)

    def add_command(self, command: str) -> "ShellCommand":
        self.commands.append(command)
        return self

    def get_commands(self) -> list[str]:
        return list(self.commands)

    def add_output(self, name: str, url: str) -> "ShellCommand":
        self.outputs[name] = url
        return self

    def get_outputs(self) -> dict[str, str]:
        return dict(self.outputs)

    def add_notification(self, url: str) -> "ShellCommand":
        self.notifications.append(url)
        self.notifications = _dedupe(self.notifications)
        return self

    def get_notifications(self) -> list[str]:
        return list(self.notifications)

    def set_custom_data(self, data: Any) -> "ShellCommand":
        self.custom_data = data
        return self

    def get_custom_data(self) -> Any:
        return self.custom_data

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary with keys in the fixed field order."""
        return {f: getattr(self, f) for f in SERIALIZATION_FIELDS}

    def to_json(self) -> str:
        """Serialize to compact JSON, keys in the order inputs, commands, outputs, notifications, custom_data."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    def from_dict(self, data: dict[str, Any]) -> "ShellCommand":
        """
        Overwrite fields from a decoded dictionary.

        Keys that are absent keep their current values.

        Raises:
            ValidationError: If a present field has the wrong shape
        """
        if "inputs" in data:
            self.inputs = _check_str_map("inputs", data["inputs"])
        if "commands" in data:
            self.commands = _check_str_list("commands", data["commands"])
        if "outputs" in data:
            self.outputs = _check_str_map("outputs", data["outputs"])
        if "notifications" in data:
            self.notifications = _dedupe(_check_str_list("notifications", data["notifications"]))
        if "custom_data" in data:
            self.custom_data = data["custom_data"]
        return self

    def from_json(self, text: str) -> "ShellCommand":
        """
        Overwrite fields from serialized JSON.

        Raises:
            ParseError: If text is not valid JSON or not a JSON object
            ValidationError: If a present field has the wrong shape
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise ParseError(f"invalid JSON: {text!r} ({e})") from e
        if not isinstance(data, dict):
            raise ParseError(f"invalid JSON: expected an object, got {type(data).__name__}")
        return self.from_dict(data)

    def __str__(self) -> str:
        return self.to_json()
