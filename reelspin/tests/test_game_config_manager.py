import os
import unittest
from unittest.mock import patch

from reelspin.error_codes import ErrorCodes
from reelspin.exceptions import NotFoundException, ValidationException
from reelspin.utils.game_config_manager import MachineConfigManager

TEST_MACHINES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'test_data', 'machines')
BUNDLED_MACHINES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'machines')


class TestMachineConfigManager(unittest.TestCase):

    def setUp(self):
        MachineConfigManager.configure(TEST_MACHINES_DIR, cache_ttl=300)

    def tearDown(self):
        MachineConfigManager.clear_cache()

    def test_list_machines(self):
        self.assertEqual(
            MachineConfigManager.list_machines(),
            ['bad_json', 'bad_lines', 'single_symbol', 'wild_scatter']
        )

    def test_get_machine_returns_config_and_cache(self):
        config, cache = MachineConfigManager.get_machine('wild_scatter')
        self.assertEqual(config.name, 'wild_scatter')
        self.assertEqual(cache, [4, 4, 4])
        self.assertEqual(config.wild_index, 2)
        self.assertEqual(config.free_spin_index, 3)

    def test_unnamed_machine_takes_directory_name(self):
        config, cache = MachineConfigManager.get_machine('single_symbol')
        self.assertEqual(config.name, 'single_symbol')
        self.assertEqual(cache, [1, 1, 1])

    def test_machine_is_cached(self):
        first = MachineConfigManager.get_machine('single_symbol')
        with patch.object(MachineConfigManager, 'load_machine_config') as mock_load:
            second = MachineConfigManager.get_machine('single_symbol')
            mock_load.assert_not_called()
        self.assertIs(first, second)

    def test_expired_entry_is_reloaded(self):
        MachineConfigManager.get_machine('single_symbol')
        with patch('reelspin.utils.game_config_manager.time.time', return_value=10 ** 12):
            with patch.object(MachineConfigManager, 'load_machine_config',
                              wraps=MachineConfigManager.load_machine_config) as mock_load:
                MachineConfigManager.get_machine('single_symbol')
                mock_load.assert_called_once_with('single_symbol')

    def test_clear_single_entry(self):
        MachineConfigManager.get_machine('single_symbol')
        MachineConfigManager.clear_cache('single_symbol')
        with patch.object(MachineConfigManager, 'load_machine_config',
                          wraps=MachineConfigManager.load_machine_config) as mock_load:
            MachineConfigManager.get_machine('single_symbol')
            mock_load.assert_called_once()

    def test_unknown_machine(self):
        with self.assertRaises(NotFoundException) as ctx:
            MachineConfigManager.get_machine('does_not_exist')
        self.assertEqual(ctx.exception.error_code, ErrorCodes.MACHINE_NOT_FOUND)
        self.assertEqual(ctx.exception.status_code, 404)

    def test_path_traversal_is_not_found(self):
        with self.assertRaises(NotFoundException):
            MachineConfigManager.get_machine('../machines')

    def test_invalid_json(self):
        with self.assertRaises(ValidationException) as ctx:
            MachineConfigManager.get_machine('bad_json')
        self.assertEqual(ctx.exception.error_code, ErrorCodes.INVALID_MACHINE_CONFIG)

    def test_invalid_definition(self):
        with self.assertRaises(ValidationException) as ctx:
            MachineConfigManager.get_machine('bad_lines')
        self.assertEqual(ctx.exception.status_code, 422)
        self.assertIn('lines', ctx.exception.details['errors'])

    def test_unconfigured_manager(self):
        with patch.object(MachineConfigManager, '_machines_dir', None):
            with self.assertRaises(RuntimeError):
                MachineConfigManager.list_machines()


class TestBundledMachines(unittest.TestCase):

    def setUp(self):
        MachineConfigManager.configure(BUNDLED_MACHINES_DIR)

    def tearDown(self):
        MachineConfigManager.clear_cache()

    def test_bundled_machines_are_valid(self):
        names = MachineConfigManager.list_machines()
        self.assertIn('classic3', names)
        self.assertIn('fruity5', names)
        for name in names:
            config, cache = MachineConfigManager.get_machine(name)
            self.assertEqual(len(cache), config.num_reels)
            self.assertTrue(all(total > 0 for total in cache))


if __name__ == '__main__':
    unittest.main()
