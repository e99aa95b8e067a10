# bce/interfaces/cli/schemas.py
"""Pydantic models for the JSON grammar file format.

Defines the document read by `bce --import --format json` and written by
`bce --export`. Example:

    {
      "commands": [
        {
          "name": "kubectl",
          "aliases": ["kc"],
          "args": [],
          "sub_commands": [
            {
              "name": "get",
              "aliases": ["g"],
              "args": [
                {
                  "arg_type": "OPTION",
                  "description": "Output format",
                  "long_name": "--output",
                  "short_name": "-o",
                  "opts": ["json", "wide"]
                }
              ]
            }
          ]
        }
      ]
    }
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from bce.core.commands.models import ArgType


class ArgDocument(BaseModel):
    """A command argument (flag).

    Attributes:
        id: Record identifier (generated on import when missing).
        arg_type: NONE, OPTION, FILE or TEXT (case-insensitive).
        description: Human readable description.
        long_name: Long form of the flag.
        short_name: Short form of the flag.
        opts: Allowed values for OPTION arguments.
    """

    id: str | None = Field(None, description="Record identifier")
    arg_type: ArgType = Field(ArgType.NONE, description="Kind of value expected")
    description: str = Field("", description="Argument description")
    long_name: str | None = Field(None, description="Long flag, e.g. --output")
    short_name: str | None = Field(None, description="Short flag, e.g. -o")
    opts: list[str] = Field(default_factory=list, description="Allowed values")

    @field_validator("arg_type", mode="before")
    @classmethod
    def _upper_arg_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @model_validator(mode="after")
    def _require_a_name(self) -> "ArgDocument":
        if not self.long_name and not self.short_name:
            raise ValueError("argument needs a long_name or a short_name")
        return self


class CommandDocument(BaseModel):
    """A command with its aliases, arguments and sub-commands."""

    id: str | None = Field(None, description="Record identifier")
    name: str = Field(..., min_length=1, description="Command name")
    aliases: list[str] = Field(default_factory=list, description="Alias names")
    args: list[ArgDocument] = Field(default_factory=list, description="Arguments")
    sub_commands: list["CommandDocument"] = Field(
        default_factory=list, description="Child commands"
    )


class GrammarDocument(BaseModel):
    """Top-level JSON grammar file: a list of root commands."""

    version: int = Field(1, description="File format version")
    commands: list[CommandDocument] = Field(
        default_factory=list, description="Root commands"
    )
