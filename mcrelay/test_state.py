import sys, os
# Ensure repo root is on sys.path so the `mcrelay` package can be imported when running this script directly
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import unittest
from mcrelay.errors import VersionMismatch
from mcrelay.state import RelayState
from mcrelay.testing import make_connection


class TestRegistry(unittest.TestCase):
    def setUp(self):
        self.state = RelayState()

    def test_register_assigns_unique_ids_and_joins_world(self):
        ids = set()
        for i in range(50):
            conn = make_connection(self.state)
            player = self.state.register(conn, f"p{i}", '1.12.2')
            self.assertNotIn(player.id, ids)
            ids.add(player.id)
            self.assertIn(player.id, self.state.world_members('overworld'))
            self.assertEqual(conn.player_id, player.id)
        self.assertEqual(len(self.state.players), 50)

    def test_register_places_player_at_spawn_with_initial_stats(self):
        player = self.state.register(make_connection(self.state), 'Alice', '1.12.2')
        self.assertEqual((player.x, player.y, player.z), (0, 64, 0))
        self.assertEqual(player.world, 'overworld')
        self.assertEqual((player.health, player.food), (20, 20))
        self.assertTrue(player.connected)

    def test_version_mismatch_leaves_registries_untouched(self):
        conn = make_connection(self.state)
        with self.assertRaises(VersionMismatch):
            self.state.register(conn, 'Alice', '1.8.9')
        self.assertEqual(self.state.players, {})
        self.assertEqual(self.state.world_members('overworld'), set())
        self.assertIsNone(conn.player_id)

    def test_unregister_is_idempotent(self):
        player = self.state.register(make_connection(self.state), 'Alice', '1.12.2')
        removed = self.state.unregister(player.id)
        self.assertIs(removed, player)
        self.assertFalse(player.connected)
        self.assertIsNone(self.state.find(player.id))
        self.assertNotIn(player.id, self.state.world_members('overworld'))
        self.assertIsNone(self.state.unregister(player.id))
        self.assertIsNone(self.state.unregister('no-such-id'))
        self.assertIsNone(self.state.unregister(None))

    def test_world_members_returns_copy(self):
        player = self.state.register(make_connection(self.state), 'Alice', '1.12.2')
        members = self.state.world_members('overworld')
        members.clear()
        self.assertIn(player.id, self.state.world_members('overworld'))
        self.assertEqual(self.state.world_members('nether'), set())

    def test_additional_worlds(self):
        self.state.add_world('nether', {'x': 5, 'y': 70, 'z': -5})
        player = self.state.register(make_connection(self.state), 'Bob', '1.12.2', world_name='nether')
        self.assertEqual((player.x, player.y, player.z), (5, 70, -5))
        self.assertEqual(self.state.world_members('nether'), {player.id})
        self.assertEqual(self.state.world_members('overworld'), set())

    def test_admins_only_lists_open_admin_connections(self):
        admin = make_connection(self.state)
        admin.is_admin = True
        closed_admin = make_connection(self.state)
        closed_admin.is_admin = True
        closed_admin.websocket.drop()
        make_connection(self.state)
        self.assertEqual(self.state.admins(), [admin])

    def test_clear_keeps_worlds(self):
        player = self.state.register(make_connection(self.state), 'Alice', '1.12.2')
        self.state.clear()
        self.assertFalse(player.connected)
        self.assertEqual(self.state.players, {})
        self.assertEqual(self.state.connections, set())
        self.assertIn('overworld', self.state.worlds)
        self.assertEqual(self.state.world_members('overworld'), set())


if __name__ == '__main__':
    unittest.main()
