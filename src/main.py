import logging
import signal
import sys
from typing import Callable, Optional

from app_config import (
    AppConfig,
    AppConfigurationError,
    load_app_config,
    load_secret_config,
    resolve_config_path,
)
from breathing import (
    DEFAULT_EXERCISE_SLUG,
    BreathingSession,
    ExerciseCatalog,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    SettingsStore,
    load_custom_exercises,
)
from runtime import PromptSpeaker, RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ServerConfigurationError, UIServer, UIServerConfig
from tts import (
    PiperTTSEngine,
    SoundDeviceAudioOutput,
    SpeechService,
    TTSConfig,
    TTSConfigurationError,
    TTSError,
)


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("breathing_app")


def setup_signal_handlers(request_stop: Callable[[], None]) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        signal_name = signal.Signals(signum).name
        logging.getLogger("breathing_app").info("%s received, stopping...", signal_name)
        request_stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def build_store(app_config: AppConfig, logger: logging.Logger) -> KeyValueStore:
    if not app_config.storage.enabled:
        logger.info("Persistent storage disabled; settings and exercises live in memory.")
        return InMemoryKeyValueStore()
    store = JsonFileKeyValueStore(
        app_config.storage.path,
        logger=logging.getLogger("breathing.storage"),
    )
    logger.info("Using store file: %s", store.path)
    return store


def build_prompt_speaker(
    app_config: AppConfig,
    hf_token: Optional[str],
    logger: logging.Logger,
) -> Optional[PromptSpeaker]:
    """Create the spoken-prompt worker, or None when speech is unavailable."""
    if not app_config.tts.enabled:
        logger.info("TTS disabled; prompts are published to the UI only.")
        return None

    try:
        tts_config = TTSConfig.from_settings(app_config.tts, hf_token=hf_token)
        speech = SpeechService(
            engine=PiperTTSEngine(tts_config, logger=logging.getLogger("tts.engine")),
            output=SoundDeviceAudioOutput(
                tts_config.output_device_index,
                logger=logging.getLogger("tts.output"),
            ),
            logger=logging.getLogger("tts"),
        )
    except (TTSConfigurationError, TTSError) as error:
        logger.error(f"Spoken prompts unavailable: {error}")
        return None

    logger.info("Spoken prompts enabled (voice %s)", tts_config.hf_filename)
    return PromptSpeaker(speech, logger=logging.getLogger("runtime.prompts"))


def start_ui_server(app_config: AppConfig, logger: logging.Logger) -> Optional[UIServer]:
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error(f"UI server configuration error: {error}")
        logger.warning("Continuing without UI server.")
        return None

    if not ui_server_config.enabled:
        return None

    ui_server = UIServer(
        config=ui_server_config,
        logger=logging.getLogger("ui_server"),
    )
    try:
        logger.info("Starting UI server...")
        ui_server.start(timeout_seconds=5.0)
    except Exception as error:
        logger.error(f"UI server startup failed: {error}")
        logger.warning("Continuing without UI server.")
        return None

    logger.info("UI server ready at http://%s:%d", ui_server.host, ui_server.port)
    return ui_server


def main() -> int:
    """Run the guided breathing service."""
    logger = setup_logging(level=logging.INFO)

    # Load typed app configuration and secrets.
    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
        secret_config = load_secret_config()
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error(f"App configuration error: {error}")
        return 1

    store = build_store(app_config, logger)

    settings = SettingsStore(store, logger=logging.getLogger("breathing.settings"))
    settings.load()

    catalog = ExerciseCatalog(logger=logging.getLogger("breathing.catalog"))
    load_custom_exercises(catalog, store, logging.getLogger("breathing.catalog"))

    exercise = app_config.session.default_exercise
    if exercise not in catalog:
        logger.warning(
            "Configured default exercise %r is unknown; using %r.",
            exercise,
            DEFAULT_EXERCISE_SLUG,
        )
        exercise = DEFAULT_EXERCISE_SLUG
    session = BreathingSession(
        catalog,
        exercise=exercise,
        logger=logging.getLogger("breathing.session"),
    )

    prompt_speaker = build_prompt_speaker(app_config, secret_config.hf_token, logger)
    ui_server = start_ui_server(app_config, logger)

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logging.getLogger("runtime"),
            session_settings=app_config.session,
            session=session,
            catalog=catalog,
            settings=settings,
            exercise_store=store,
            prompt_sink=prompt_speaker,
            ui_server=ui_server,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )
    if ui_server is not None:
        ui_server.set_command_handler(engine.submit)

    return engine.run()


if __name__ == "__main__":
    sys.exit(main())
