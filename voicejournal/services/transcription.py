"""Audio transcription service backed by OpenAI Whisper."""

import asyncio
from pathlib import Path

from openai import AsyncOpenAI, OpenAIError

from voicejournal.config import settings
from voicejournal.errors import TranscriptionError


class TranscriptionService:
    """Service for turning stored audio entries into text."""

    def __init__(self, storage_dir: str | Path | None = None):
        self._client: AsyncOpenAI | None = None
        self._storage_dir = Path(storage_dir or settings.audio_storage_dir)

    @property
    def client(self) -> AsyncOpenAI:
        """Lazily initialize the OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=settings.openai_api_key)
        return self._client

    def resolve_audio_path(self, audio_ref: str) -> Path:
        """Map an entry's audio reference (e.g. "/uploads/a.webm") to a stored file."""
        return self._storage_dir / Path(audio_ref).name

    async def transcribe(self, audio_ref: str) -> str:
        """Transcribe one audio file.

        Args:
            audio_ref: The entry's audio reference.

        Returns:
            The transcribed text.

        Raises:
            TranscriptionError: If the file is missing or the API call fails.
        """
        path = self.resolve_audio_path(audio_ref)
        if not path.is_file():
            raise TranscriptionError(f"Audio file not found at {path}")

        audio = await asyncio.to_thread(path.read_bytes)
        try:
            response = await self.client.audio.transcriptions.create(
                model=settings.transcription_model,
                file=(path.name, audio),
                language=settings.transcription_language,
            )
        except OpenAIError as exc:
            raise TranscriptionError(str(exc)) from exc

        return response.text


# Global singleton instance
transcription_service = TranscriptionService()
