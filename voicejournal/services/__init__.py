"""Services layer for voicejournal."""

from voicejournal.services.weeks import WeekService, week_service
from voicejournal.services.users import UserService, user_service
from voicejournal.services.entries import EntryService, entry_service
from voicejournal.services.transcription import TranscriptionService, transcription_service
from voicejournal.services.summarization import SummarizationService, summarization_service
from voicejournal.services.reflection import ReflectionService, reflection_service
from voicejournal.services.scheduler import ReflectionScheduler, reflection_scheduler

__all__ = [
    "WeekService",
    "week_service",
    "UserService",
    "user_service",
    "EntryService",
    "entry_service",
    "TranscriptionService",
    "transcription_service",
    "SummarizationService",
    "summarization_service",
    "ReflectionService",
    "reflection_service",
    "ReflectionScheduler",
    "reflection_scheduler",
]
