"""Background prompt speaker so speech playback never blocks the session loop."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Optional

from tts import TTSError

from .contracts import SpeechServiceLike


class PromptSpeaker:
    """Queues prompts onto a single worker thread, preserving their order."""

    def __init__(
        self,
        speech_service: SpeechServiceLike,
        logger: Optional[logging.Logger] = None,
        executor: Optional[concurrent.futures.Executor] = None,
    ):
        self._speech_service = speech_service
        self._logger = logger or logging.getLogger("runtime.prompts")
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="speech",
        )

    def speak(self, text: str, *, volume: float, rate: float) -> None:
        try:
            future = self._executor.submit(self._speak, text, volume, rate)
        except RuntimeError as error:
            # Executor already shut down.
            self._logger.warning("Dropping prompt %r: %s", text, error)
            return
        future.add_done_callback(self._log_failure)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _speak(self, text: str, volume: float, rate: float) -> None:
        try:
            self._speech_service.speak(text, volume=volume, rate=rate)
        except TTSError as error:
            self._logger.error("Prompt playback failed: %s", error)

    def _log_failure(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self._logger.error("Speech worker failed: %s", error, exc_info=error)
