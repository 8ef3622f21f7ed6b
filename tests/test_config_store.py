import copy
import unittest

from ticker_console.errors import DeviceRejectedError, DeviceTransportError
from ticker_console.schemas.device_config import ConfigFieldsUpdate, DeviceConfig, TickerConfig, TickerType
from ticker_console.services.config_store import ConfigStore
from ticker_console.services.notifier import Notifier


class ManualScheduler:
    def __init__(self) -> None:
        self.pending = []

    def __call__(self, delay, callback):
        self.pending.append((delay, callback))

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for _delay, callback in pending:
            callback()


class FakeDevice:
    def __init__(self, config: dict | None = None) -> None:
        self.config = config if config is not None else {
            "brightness": 200,
            "baseTimeMs": 6000,
            "numTickers": 2,
            "coinGeckoApiKey": "cg",
            "twelveDataApiKey": "td",
            "tickers": [
                {"symbol": "BTC", "apiId": "bitcoin", "type": 0, "timeMultiplier": 1.0, "enabled": True},
                {"symbol": "SPX", "apiId": "SPY", "type": 1, "timeMultiplier": 2.0, "enabled": False},
            ],
        }
        self.posted = []
        self.load_error: Exception | None = None
        self.post_error: Exception | None = None

    def get_config(self) -> dict:
        if self.load_error is not None:
            raise self.load_error
        return copy.deepcopy(self.config)

    def post_config(self, payload: dict) -> None:
        if self.post_error is not None:
            raise self.post_error
        self.posted.append(copy.deepcopy(payload))
        self.config = copy.deepcopy(payload)


class ConfigStoreTest(unittest.TestCase):
    def setUp(self):
        self.device = FakeDevice()
        self.timers = ManualScheduler()
        self.notifier = Notifier(scheduler=self.timers)
        self.store = ConfigStore(
            client=self.device,
            notifier=self.notifier,
            reload_delay_sec=1.0,
            scheduler=self.timers,
        )

    def test_load_replaces_snapshot_and_notifies_listeners(self):
        seen = []
        self.store.add_listener(seen.append)

        config = self.store.load()

        self.assertIsNotNone(config)
        self.assertEqual(config.brightness, 200)
        self.assertEqual([t.symbol for t in config.tickers], ["BTC", "SPX"])
        self.assertEqual(config.tickers[1].type, TickerType.STOCK)
        self.assertEqual(seen, [config])

    def test_absent_and_null_fields_are_defaulted(self):
        self.device.config = {"brightness": None, "tickers": [{"symbol": "ETH"}]}

        config = self.store.load()

        self.assertEqual(config.brightness, 128)
        self.assertEqual(config.base_time_ms, 8000)
        self.assertEqual(config.coin_gecko_api_key, "")
        self.assertEqual(config.twelve_data_api_key, "")
        ticker = config.tickers[0]
        self.assertEqual(ticker.api_id, "")
        self.assertEqual(ticker.type, TickerType.CRYPTO)
        self.assertEqual(ticker.time_multiplier, 1.0)
        self.assertTrue(ticker.enabled)

    def test_load_discards_unsaved_edits(self):
        self.store.load()
        self.store.config.tickers.append(TickerConfig(symbol="DOGE"))
        self.store.edit(ConfigFieldsUpdate(brightness=10))

        config = self.store.load()

        self.assertEqual(config.brightness, 200)
        self.assertEqual(len(config.tickers), 2)

    def test_failed_load_keeps_previous_snapshot_and_reports_error(self):
        previous = self.store.load()
        self.device.load_error = DeviceTransportError("timed out")

        result = self.store.load()

        self.assertIsNone(result)
        self.assertIs(self.store.config, previous)
        notice = self.notifier.current()
        self.assertEqual(notice.level, "error")
        self.assertEqual(notice.text, "Failed to load config: timed out")
        self.assertEqual(self.store.metrics()["load_failures"], 1)

    def test_invalid_payload_is_reported_as_load_failure(self):
        self.device.config = {"brightness": 999}

        self.assertIsNone(self.store.load())
        self.assertIsNone(self.store.config)
        self.assertTrue(self.notifier.current().text.startswith("Failed to load config: "))

    def test_save_recomputes_count_and_schedules_reload(self):
        self.store.load()
        edited = self.store.snapshot_for_save(
            [TickerConfig(symbol="ETH", api_id="ethereum"), TickerConfig(symbol="SOL"), TickerConfig(symbol="XMR")]
        )
        edited.num_tickers = 99

        ok = self.store.save(edited)

        self.assertTrue(ok)
        posted = self.device.posted[-1]
        self.assertEqual(posted["numTickers"], 3)
        self.assertEqual(posted["tickers"][0], {
            "symbol": "ETH",
            "apiId": "ethereum",
            "type": 0,
            "timeMultiplier": 1.0,
            "enabled": True,
        })
        self.assertEqual(self.notifier.current().text, "Configuration saved successfully")

        reloads = [(d, cb) for d, cb in self.timers.pending if cb == self.store.load]
        self.assertEqual(len(reloads), 1)
        self.assertEqual(reloads[0][0], 1.0)

    def test_save_then_reload_reflects_submitted_ticker_count(self):
        self.store.load()
        edited = self.store.snapshot_for_save([TickerConfig(symbol="BTC")])

        self.store.save(edited)
        self.assertEqual(len(self.store.config.tickers), 2)

        self.timers.run_all()

        self.assertEqual(len(self.store.config.tickers), self.device.posted[-1]["numTickers"])
        self.assertEqual(self.store.config.num_tickers, 1)

    def test_two_saves_reload_to_the_last_one(self):
        self.store.load()
        self.store.save(self.store.snapshot_for_save([TickerConfig(symbol="A")]))
        self.store.save(self.store.snapshot_for_save([TickerConfig(symbol="B"), TickerConfig(symbol="C")]))

        self.timers.run_all()

        self.assertEqual([t.symbol for t in self.store.config.tickers], ["B", "C"])

    def test_rejected_save_surfaces_server_text_verbatim(self):
        self.store.load()
        self.device.post_error = DeviceRejectedError(400, '{"error":"Invalid JSON"}')
        edited = self.store.snapshot_for_save([TickerConfig(symbol="BTC")])

        ok = self.store.save(edited)

        self.assertFalse(ok)
        self.assertEqual(self.notifier.current().text, 'Save failed: {"error":"Invalid JSON"}')
        self.assertFalse(any(cb == self.store.load for _d, cb in self.timers.pending))
        self.assertEqual(len(self.store.config.tickers), 2)

    def test_transport_failure_on_save_reports_raw_error(self):
        self.store.load()
        self.device.post_error = DeviceTransportError("connection reset")

        ok = self.store.save(self.store.snapshot_for_save([]))

        self.assertFalse(ok)
        self.assertEqual(self.notifier.current().text, "Save failed: connection reset")

    def test_out_of_range_multiplier_is_rejected_before_submission(self):
        self.store.load()
        edited = self.store.snapshot_for_save([TickerConfig(symbol="BTC", time_multiplier=6.0)])

        ok = self.store.save(edited)

        self.assertFalse(ok)
        self.assertEqual(self.device.posted, [])
        self.assertIn("timeMultiplier", self.notifier.current().text)

    def test_more_than_max_tickers_is_rejected_before_submission(self):
        self.store.load()
        edited = self.store.snapshot_for_save([TickerConfig(symbol=f"T{i}") for i in range(16)])

        self.assertFalse(self.store.save(edited))
        self.assertEqual(self.device.posted, [])

    def test_save_without_loaded_config(self):
        self.assertFalse(self.store.save(None))
        self.assertEqual(self.notifier.current().text, "No config loaded")

    def test_edit_updates_scalar_fields(self):
        self.store.load()

        config = self.store.edit(ConfigFieldsUpdate(base_time_ms=12000, cmc_api_key="cmc"))

        self.assertEqual(config.base_time_ms, 12000)
        self.assertEqual(config.cmc_api_key, "cmc")
        self.assertEqual(config.brightness, 200)

    def test_to_payload_uses_wire_names(self):
        config = DeviceConfig.model_validate({"tickers": [{"symbol": "EUR", "type": 2}]})

        payload = config.to_payload()

        self.assertEqual(payload["numTickers"], 1)
        self.assertEqual(payload["baseTimeMs"], 8000)
        self.assertEqual(payload["tickers"][0]["type"], 2)
        self.assertIn("cmcApiKey", payload)


if __name__ == "__main__":
    unittest.main()
