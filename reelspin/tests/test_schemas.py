import unittest

from marshmallow import ValidationError

from reelspin.models import (
    FreeSpinCondition, FreeSpinState, LineWin, MachineConfig, SpinResult, Storage, WildSymbol
)
from reelspin.schemas import (
    MachineConfigSchema, StorageSchema, SpinResultSchema, SpinRequestSchema
)

VALID_MACHINE = {
    "name": "schema_test",
    "rows": 3,
    "reels": [[1, 2, 3], [3, 2, 1], [1, 1, 1]],
    "lines": [[0, 0, 0], [1, 1, 1], [2, 1, 0]],
    "prizeTable": {"0": [0, 1, 5], "2": [0, 0, 2.5]},
    "wild": {"index": 1},
    "freeSpin": {
        "index": 2,
        "conditions": [{"count": 3, "total": 5, "multiply": 2}, {"count": 4, "total": 8}]
    }
}


def machine(**overrides):
    data = dict(VALID_MACHINE)
    data.update(overrides)
    return data


class TestMachineConfigSchema(unittest.TestCase):

    def test_load_valid_machine(self):
        config = MachineConfigSchema().load(VALID_MACHINE)
        self.assertIsInstance(config, MachineConfig)
        self.assertEqual(config.rows, 3)
        self.assertEqual(config.num_reels, 3)
        self.assertEqual(config.prize_table, {0: [0, 1, 5], 2: [0, 0, 2.5]})
        self.assertEqual(config.wild, WildSymbol(index=1))
        self.assertEqual(config.free_spin.index, 2)
        self.assertEqual(config.free_spin.conditions[0], FreeSpinCondition(count=3, total=5, multiply=2))
        self.assertIsNone(config.free_spin.conditions[1].multiply)

    def test_optional_features_default_to_none(self):
        data = machine()
        del data['wild']
        del data['freeSpin']
        config = MachineConfigSchema().load(data)
        self.assertIsNone(config.wild)
        self.assertIsNone(config.free_spin)
        self.assertIsNone(config.wild_index)
        self.assertIsNone(config.free_spin_index)

    def test_explicit_zero_multiply_survives_load(self):
        data = machine(freeSpin={"index": 2, "conditions": [{"count": 3, "total": 5, "multiply": 0}]})
        config = MachineConfigSchema().load(data)
        self.assertEqual(config.free_spin.conditions[0].multiply, 0)

    def test_zero_weight_reel_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            MachineConfigSchema().load(machine(reels=[[1, 2, 3], [0, 0], [1]]))
        self.assertIn('reels', ctx.exception.messages)

    def test_negative_weight_rejected(self):
        with self.assertRaises(ValidationError):
            MachineConfigSchema().load(machine(reels=[[1, -2, 3], [1], [1]]))

    def test_line_length_must_match_reels(self):
        with self.assertRaises(ValidationError) as ctx:
            MachineConfigSchema().load(machine(lines=[[0, 0]]))
        self.assertIn('lines', ctx.exception.messages)

    def test_line_row_out_of_range(self):
        with self.assertRaises(ValidationError) as ctx:
            MachineConfigSchema().load(machine(lines=[[0, 3, 0]]))
        self.assertIn('lines', ctx.exception.messages)

    def test_prize_table_values_must_be_numbers(self):
        with self.assertRaises(ValidationError):
            MachineConfigSchema().load(machine(prizeTable={"0": [0, "ten", 5]}))
        with self.assertRaises(ValidationError):
            MachineConfigSchema().load(machine(prizeTable={"0": 5}))

    def test_missing_required_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            MachineConfigSchema().load({"rows": 1})
        for key in ('reels', 'lines', 'prizeTable'):
            self.assertIn(key, ctx.exception.messages)

    def test_dump_uses_wire_keys(self):
        dumped = MachineConfigSchema().dump(MachineConfigSchema().load(VALID_MACHINE))
        self.assertIn('prizeTable', dumped)
        self.assertIn('freeSpin', dumped)
        self.assertEqual(dumped['wild'], {'index': 1})
        self.assertEqual(dumped['prizeTable'][0], [0, 1, 5])


class TestStorageSchema(unittest.TestCase):

    def test_empty_storage(self):
        self.assertEqual(StorageSchema().load({}), Storage(free_spin=None))

    def test_partial_free_spin_uses_neutral_defaults(self):
        storage = StorageSchema().load({"freeSpin": {"total": 3}})
        self.assertEqual(storage.free_spin, FreeSpinState(multiplier=1, symbols=0, total=3))

    def test_round_trip_shape(self):
        storage = Storage(free_spin=FreeSpinState(multiplier=2, symbols=3, total=5))
        self.assertEqual(StorageSchema().dump(storage), {"freeSpin": {"multiplier": 2, "symbols": 3, "total": 5}})

    def test_rejects_non_numeric_multiplier(self):
        with self.assertRaises(ValidationError):
            StorageSchema().load({"freeSpin": {"multiplier": "two"}})


class TestSpinSchemas(unittest.TestCase):

    def test_result_dump(self):
        result = SpinResult(
            prize=10,
            lines=[LineWin(index=0, combo=3, prize=10, wc=0, ss=[0, 0, 0])],
            exit_storage=Storage(free_spin=FreeSpinState(multiplier=1, symbols=0, total=0))
        )
        self.assertEqual(SpinResultSchema().dump(result), {
            "prize": 10,
            "lines": [{"index": 0, "combo": 3, "prize": 10, "wc": 0, "ss": [0, 0, 0]}],
            "exitStorage": {"freeSpin": {"multiplier": 1, "symbols": 0, "total": 0}}
        })

    def test_spin_request(self):
        data = SpinRequestSchema().load({"machine": "classic3", "maxLines": 5, "betPerLine": 2})
        self.assertEqual(data, {"machine": "classic3", "max_lines": 5, "bet_per_line": 2, "storage": None})

    def test_spin_request_with_storage(self):
        data = SpinRequestSchema().load({
            "machine": "classic3", "maxLines": 5, "betPerLine": 0.5,
            "storage": {"freeSpin": {"multiplier": 2, "symbols": 3, "total": 4}}
        })
        self.assertEqual(data['storage'], Storage(free_spin=FreeSpinState(multiplier=2, symbols=3, total=4)))

    def test_spin_request_rejects_path_like_machine(self):
        with self.assertRaises(ValidationError) as ctx:
            SpinRequestSchema().load({"machine": "../etc", "maxLines": 1, "betPerLine": 1})
        self.assertIn('machine', ctx.exception.messages)

    def test_spin_request_rejects_negative_lines(self):
        with self.assertRaises(ValidationError) as ctx:
            SpinRequestSchema().load({"machine": "classic3", "maxLines": -1, "betPerLine": 1})
        self.assertIn('maxLines', ctx.exception.messages)


if __name__ == '__main__':
    unittest.main()
