"""Locate a Piper voice on disk, fetching it from the Hugging Face Hub if absent."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from huggingface_hub import hf_hub_download
from huggingface_hub.utils import EntryNotFoundError, HfHubHTTPError, RepositoryNotFoundError

from .config import TTSConfig
from .errors import TTSError


@dataclass(frozen=True)
class VoiceFiles:
    """A Piper voice is an ONNX model plus its JSON sidecar."""
    model: Path
    config: Path

    @classmethod
    def for_config(cls, config: TTSConfig) -> "VoiceFiles":
        voice_dir = Path(config.model_path).expanduser()
        model = voice_dir / config.hf_filename
        return cls(model=model, config=model.with_name(f"{model.name}.json"))

    def missing(self) -> list[Path]:
        return [path for path in (self.model, self.config) if not path.is_file()]


def ensure_voice_files(config: TTSConfig, logger: Optional[logging.Logger] = None) -> VoiceFiles:
    log = logger or logging.getLogger("tts.voice_files")
    voice = VoiceFiles.for_config(config)
    missing = voice.missing()
    if not missing:
        return voice

    repo_id = config.hf_repo_id.strip()
    if not repo_id:
        raise TTSError(
            f"Piper voice files are missing: {', '.join(path.name for path in missing)}. "
            "Place them in tts.model_path or set tts.hf_repo_id to download them."
        )

    local_dir = Path(config.model_path).expanduser()
    try:
        local_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise TTSError(f"Cannot create voice directory {local_dir}: {error}") from error

    for path in missing:
        filename = path.relative_to(local_dir).as_posix()
        log.info("Fetching Piper voice file %s from %s", filename, repo_id)
        _download(config, repo_id=repo_id, filename=filename, local_dir=local_dir)

    still_missing = voice.missing()
    if still_missing:
        raise TTSError(
            "Piper voice download incomplete, still missing: "
            + ", ".join(str(path) for path in still_missing)
        )
    return voice


def _download(config: TTSConfig, *, repo_id: str, filename: str, local_dir: Path) -> None:
    try:
        hf_hub_download(
            repo_id=repo_id,
            filename=filename,
            revision=config.hf_revision,
            token=config.hf_token,
            local_dir=str(local_dir),
        )
    except RepositoryNotFoundError as error:
        raise TTSError(f"Voice repository not found: {repo_id}") from error
    except EntryNotFoundError as error:
        raise TTSError(f"Voice file {filename} not found in {repo_id}") from error
    except HfHubHTTPError as error:
        raise TTSError(f"Hub request for {filename} failed: {error}") from error
    except OSError as error:
        raise TTSError(f"Could not store {filename} in {local_dir}: {error}") from error
