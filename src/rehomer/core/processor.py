"""Base class for steps run against a loaded model."""

from abc import ABC, abstractmethod

from ..graph import ModelInfo


class ModelProcessor(ABC):
    """
    One step of a conversion: probe, script, writer.

    Processors run in order against the same ModelInfo.
    """

    @abstractmethod
    def apply(self, info: ModelInfo) -> None:
        pass
