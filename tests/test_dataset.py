import json
import tempfile
import unittest
from pathlib import Path

from stockdata.config.env import DataConfig
from stockdata.ingestion.dataset import Dataset, DatasetError, load_dataset, load_json

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class TestDataset(unittest.TestCase):
    def test_load_sample(self):
        ds = load_dataset(DataConfig(data_dir=DATA_DIR))
        self.assertEqual(ds.ratio_codes(), ["38716", "13673"])
        self.assertEqual(sorted(ds.ohlc_codes()), ["13673", "199", "5020"])
        self.assertEqual(len(ds.ratios["38716"]), 7)
        # file order preserved, not re-sorted on load
        self.assertEqual(ds.ohlc["13673"][0]["date"], "2022-04-04")

    def test_records_read_only(self):
        ds = Dataset.from_dicts({"1": [{"date": "2022-01-01", "pe": 1.0}]}, {})
        with self.assertRaises(TypeError):
            ds.ratios["1"][0]["pe"] = 2.0
        with self.assertRaises(TypeError):
            ds.ratios["2"] = ()

    def test_codes_are_strings(self):
        ds = Dataset.from_dicts({}, {13673: [{"date": "2022-01-01"}]})
        self.assertEqual(ds.ohlc_codes(), ["13673"])

    def test_missing_file(self):
        with self.assertRaises(DatasetError):
            load_json(DATA_DIR / "nope.json")

    def test_bad_shapes(self):
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "x.json"
            p.write_text("[1, 2]")
            with self.assertRaises(DatasetError):
                load_json(p)
            p.write_text(json.dumps({"1": {"date": "2022-01-01"}}))
            with self.assertRaises(DatasetError):
                load_json(p)
            p.write_text("{not json")
            with self.assertRaises(DatasetError):
                load_json(p)


if __name__ == "__main__":
    unittest.main()
