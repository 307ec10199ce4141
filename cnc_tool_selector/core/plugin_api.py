"""Plugin interfaces (ABCs) implemented by the CncToolSelector plugins."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class PluginInfo:
    name: str
    version: str
    description: str
    author: str
    dependencies: list = field(default_factory=list)


class PluginBase(ABC):
    @abstractmethod
    def get_info(self) -> PluginInfo:
        ...

    @abstractmethod
    def activate(self, context: Any) -> None:
        """Receive the activation context.

        The context dict carries ``config``, ``event_bus``, ``logger``, a
        ``session`` callable returning the current session id, and every
        declared dependency plugin under its name.
        """

    @abstractmethod
    def deactivate(self) -> None:
        ...


class ParameterEnginePlugin(PluginBase):
    """Flat input dict in, evaluated record out."""

    @abstractmethod
    def get_input_schema(self) -> dict:
        ...

    @abstractmethod
    def calculate_parameters(self, inputs: dict) -> Any:
        ...

    @abstractmethod
    def validate_parameters(self, inputs: dict) -> Any:
        ...

    @abstractmethod
    def get_supported_applications(self) -> list:
        ...


class ReportExporterPlugin(PluginBase):
    """Writes an evaluation and/or a comparison to report files."""

    @abstractmethod
    def supported_formats(self) -> list:
        ...

    @abstractmethod
    def export(self, fmt: str, evaluation: Any = None, comparison: Any = None,
               output_dir: Optional[str] = None) -> str:
        ...

    def export_all(self, evaluation: Any = None, comparison: Any = None,
                   output_dir: Optional[str] = None) -> dict:
        return {fmt: self.export(fmt, evaluation, comparison, output_dir)
                for fmt in self.supported_formats()}
