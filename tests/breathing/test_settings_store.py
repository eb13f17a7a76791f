import json
import unittest

from breathing import InMemoryKeyValueStore, Settings, SettingsStore, StorageError
from breathing.settings import parse_settings_record


class _WriteFailingStore(InMemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        raise StorageError("read-only medium")


class ParseSettingsRecordTests(unittest.TestCase):
    def test_fields_fall_back_individually(self) -> None:
        settings = parse_settings_record({"speechVolume": "bad", "musicVolume": 40})
        self.assertEqual(Settings(speech_volume=70, music_volume=40), settings)

    def test_rejects_out_of_range_and_bool_values(self) -> None:
        settings = parse_settings_record({"speechVolume": 101, "musicVolume": True})
        self.assertEqual(Settings(), settings)

    def test_non_mapping_gives_defaults(self) -> None:
        self.assertEqual(Settings(), parse_settings_record([70, 50]))
        self.assertEqual(Settings(), parse_settings_record(None))


class SettingsStoreTests(unittest.TestCase):
    def test_load_defaults_when_absent(self) -> None:
        settings = SettingsStore(InMemoryKeyValueStore()).load()

        self.assertEqual(70, settings.speech_volume)
        self.assertEqual(50, settings.music_volume)

    def test_load_partial_record(self) -> None:
        store = InMemoryKeyValueStore(
            {"breathingAppSettings": json.dumps({"speechVolume": "bad", "musicVolume": 40})}
        )

        settings = SettingsStore(store).load()

        self.assertEqual(70, settings.speech_volume)
        self.assertEqual(40, settings.music_volume)

    def test_load_unparsable_record_uses_defaults(self) -> None:
        store = InMemoryKeyValueStore({"breathingAppSettings": "{oops"})

        with self.assertLogs("breathing.settings", level="WARNING"):
            settings = SettingsStore(store).load()

        self.assertEqual(Settings(), settings)

    def test_set_volume_persists_immediately(self) -> None:
        store = InMemoryKeyValueStore()
        settings_store = SettingsStore(store)
        settings_store.load()

        updated = settings_store.set_volume("speech", 35)

        self.assertEqual(35, updated.speech_volume)
        self.assertEqual(0.35, settings_store.current.speech_volume_fraction)
        self.assertEqual(
            {"speechVolume": 35, "musicVolume": 50},
            json.loads(store.get("breathingAppSettings")),
        )
        self.assertEqual(35, SettingsStore(store).load().speech_volume)

    def test_set_volume_music_channel(self) -> None:
        settings_store = SettingsStore(InMemoryKeyValueStore())
        updated = settings_store.set_volume("music", 0)
        self.assertEqual(0, updated.music_volume)
        self.assertEqual(70, updated.speech_volume)

    def test_set_volume_rejects_unknown_channel(self) -> None:
        settings_store = SettingsStore(InMemoryKeyValueStore())
        with self.assertRaises(ValueError):
            settings_store.set_volume("ambient", 10)
        self.assertEqual(Settings(), settings_store.current)

    def test_persistence_failure_is_not_raised(self) -> None:
        settings_store = SettingsStore(_WriteFailingStore())

        with self.assertLogs("breathing.settings", level="WARNING"):
            updated = settings_store.set_volume("speech", 20)

        self.assertEqual(20, updated.speech_volume)
        self.assertEqual(20, settings_store.current.speech_volume)


if __name__ == "__main__":
    unittest.main()
