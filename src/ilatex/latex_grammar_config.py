"""Registries of the commands and environments the LaTeX grammar knows about."""

from dataclasses import dataclass, field
from enum import Enum
import json
import os
from typing import Any, Dict, List

from ilatex.latex_exceptions import LatexGrammarConfigError


class ParameterDelimiter(Enum):
    """Delimiters surrounding a declared parameter."""
    CURLY = "curly"
    SQUARE = "square"


class ParameterContent(Enum):
    """Sub-grammars that can read the content of a declared parameter."""
    PARAMETER = "parameter"
    OPTIONAL_PARAMETER = "optional_parameter"
    PARAMETER_LIST = "parameter_list"


@dataclass
class ParameterSpecification:
    """A parameter declared by a known command or environment."""
    delimiter: ParameterDelimiter
    content: ParameterContent
    optional: bool = False


@dataclass
class CommandSpecification:
    """A command with a hand-written parameter grammar."""
    name: str
    parameters: List[ParameterSpecification] = field(default_factory=list)


@dataclass
class EnvironmentSpecification:
    """An environment with a hand-written parameter grammar."""
    name: str
    parameters: List[ParameterSpecification] = field(default_factory=list)


@dataclass
class LatexGrammarConfig:
    """
    Commands and environments parsed with their own grammar.

    Anything not listed here is parsed with the generic command or environment grammar.
    """
    known_environments: List[EnvironmentSpecification] = field(default_factory=list)
    known_commands: List[CommandSpecification] = field(default_factory=list)

    @classmethod
    def create_default(cls) -> "LatexGrammarConfig":
        """Create the default registries used by the visualisations."""
        return cls(
            known_environments=[
                EnvironmentSpecification("tabular", [
                    ParameterSpecification(ParameterDelimiter.CURLY, ParameterContent.PARAMETER)
                ]),
                EnvironmentSpecification("itemize", []),
                EnvironmentSpecification("gridlayout", [
                    ParameterSpecification(ParameterDelimiter.SQUARE, ParameterContent.OPTIONAL_PARAMETER, optional=True)
                ]),
                EnvironmentSpecification("row", [
                    ParameterSpecification(ParameterDelimiter.CURLY, ParameterContent.PARAMETER)
                ]),
                EnvironmentSpecification("cell", [
                    ParameterSpecification(ParameterDelimiter.CURLY, ParameterContent.PARAMETER)
                ])
            ],
            known_commands=[
                CommandSpecification("includegraphics", [
                    ParameterSpecification(ParameterDelimiter.SQUARE, ParameterContent.PARAMETER_LIST, optional=True),
                    ParameterSpecification(ParameterDelimiter.CURLY, ParameterContent.PARAMETER)
                ]),
                CommandSpecification("\\", [
                    ParameterSpecification(ParameterDelimiter.SQUARE, ParameterContent.OPTIONAL_PARAMETER, optional=True)
                ])
            ]
        )

    @property
    def environment_names(self) -> List[str]:
        """Names of the known environments."""
        return [environment.name for environment in self.known_environments]

    @property
    def command_names(self) -> List[str]:
        """Names of the known commands."""
        return [command.name for command in self.known_commands]

    def find_environment(self, name: str) -> EnvironmentSpecification | None:
        """Get the specification of a known environment, if there is one."""
        for environment in self.known_environments:
            if environment.name == name:
                return environment

        return None

    def find_command(self, name: str) -> CommandSpecification | None:
        """Get the specification of a known command, if there is one."""
        for command in self.known_commands:
            if command.name == name:
                return command

        return None

    @staticmethod
    def _parameters_from_list(owner: str, data: Any) -> List[ParameterSpecification]:
        if not isinstance(data, list):
            raise LatexGrammarConfigError(
                f"Parameters of '{owner}' must be a list",
                {'owner': owner, 'parameters': data}
            )

        parameters = []
        for parameter_data in data:
            if not isinstance(parameter_data, dict):
                raise LatexGrammarConfigError(
                    f"Invalid parameter specification for '{owner}': expected an object",
                    {'owner': owner, 'parameter': parameter_data}
                )

            try:
                parameters.append(ParameterSpecification(
                    delimiter=ParameterDelimiter(parameter_data["delimiter"]),
                    content=ParameterContent(parameter_data["content"]),
                    optional=bool(parameter_data.get("optional", False))
                ))

            except (KeyError, ValueError) as e:
                raise LatexGrammarConfigError(
                    f"Invalid parameter specification for '{owner}': {e}",
                    {'owner': owner, 'parameter': parameter_data}
                ) from e

        return parameters

    @staticmethod
    def _entries_from_dict(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        entries = data.get(key, [])
        if not isinstance(entries, list):
            raise LatexGrammarConfigError(f"'{key}' must be a list", {'entries': entries})

        for entry in entries:
            if not isinstance(entry, dict):
                raise LatexGrammarConfigError(f"Entries of '{key}' must be objects", {'entry': entry})

            name = entry.get("name")
            if not name or not isinstance(name, str):
                raise LatexGrammarConfigError(f"Entry of '{key}' without a name", {'entry': entry})

        return entries

    @classmethod
    def from_dict(cls, data: Any) -> "LatexGrammarConfig":
        """
        Create a configuration from its dictionary form.

        Args:
            data: Dictionary with "environments" and "commands" lists

        Returns:
            The configuration

        Raises:
            LatexGrammarConfigError: If the data or one of its entries is malformed
        """
        if not isinstance(data, dict):
            raise LatexGrammarConfigError("Grammar configuration must be an object", {'data': data})

        config = cls()

        for environment_data in cls._entries_from_dict(data, "environments"):
            name = environment_data["name"]
            config.known_environments.append(EnvironmentSpecification(
                name,
                cls._parameters_from_list(name, environment_data.get("parameters", []))
            ))

        for command_data in cls._entries_from_dict(data, "commands"):
            name = command_data["name"]
            config.known_commands.append(CommandSpecification(
                name,
                cls._parameters_from_list(name, command_data.get("parameters", []))
            ))

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert the configuration into a JSON-serializable dictionary."""
        def parameters_to_list(parameters: List[ParameterSpecification]) -> List[Dict[str, Any]]:
            return [
                {
                    "delimiter": parameter.delimiter.value,
                    "content": parameter.content.value,
                    "optional": parameter.optional
                }
                for parameter in parameters
            ]

        return {
            "environments": [
                {"name": environment.name, "parameters": parameters_to_list(environment.parameters)}
                for environment in self.known_environments
            ],
            "commands": [
                {"name": command.name, "parameters": parameters_to_list(command.parameters)}
                for command in self.known_commands
            ]
        }

    @classmethod
    def load(cls, path: str) -> "LatexGrammarConfig":
        """
        Load a grammar configuration from file.

        Args:
            path: Path to the configuration file

        Returns:
            The loaded configuration

        Raises:
            json.JSONDecodeError: If file contains invalid JSON
            LatexGrammarConfigError: If the configuration or one of its entries is malformed
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls.from_dict(data)

    def save(self, path: str) -> None:
        """
        Save the grammar configuration to file.

        Args:
            path: Path to save the configuration file

        Raises:
            OSError: If there's an issue creating the directory or writing the file
        """
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=4)
