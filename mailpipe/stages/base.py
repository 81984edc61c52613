"""Stage contract shared by every pipeline unit.

A chain is a singly linked list of stages. Each stage receives one record at a
time through :meth:`Stage.process` and hands zero or more records to its
successor through :meth:`Stage.forward`. Only the source stage is driven from
outside, via :meth:`Stage.drive`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from mailpipe.errors import ContractViolation
from mailpipe.record import Record


class Stage(ABC):
    name: str = "stage"

    def __init__(self) -> None:
        self._successor: Optional[Stage] = None

    @property
    def successor(self) -> Optional[Stage]:
        return self._successor

    def set_successor(self, stage: Stage) -> None:
        # Overwrites silently; the builder is the only caller.
        self._successor = stage

    @abstractmethod
    def process(self, record: Record) -> None:
        ...

    def drive(self) -> int:
        raise ContractViolation(f"{type(self).__name__} cannot be driven; only a source stage can")

    def forward(self, record: Record) -> None:
        """Hand ``record`` to the successor, or drop it at the end of the chain.

        The caller must not touch ``record`` afterwards.
        """
        if self._successor is not None:
            self._successor.process(record)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
