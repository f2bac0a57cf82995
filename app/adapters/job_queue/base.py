"""Job queue interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailJob:
    """Email waiting to be sent.

    Attributes:
        id: Sequential identifier assigned by the queue.
        to: Recipient address.
        subject: Message subject.
        text: Plain text body.
    """

    id: int
    to: str
    subject: str
    text: str


class AbstractJobQueue(ABC):
    """Interface for email job queues."""

    @abstractmethod
    def enqueue(self, to: str, subject: str, text: str) -> EmailJob:
        """Add an email job to the queue.

        Returns:
            The queued job.

        Raises:
            JobQueueAppError: If the queue cannot accept the job.
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def pending(self) -> int:
        """Number of jobs waiting to be processed."""

    @abstractmethod
    def close(self) -> None:
        """Stop processing and release worker resources."""
        raise NotImplementedError
