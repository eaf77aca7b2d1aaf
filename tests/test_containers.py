import unittest

from simplab.classifier import classify
from simplab.containers import ContainerManager, ContainerState, fill_level
from simplab.errors import (
    ContainerFullError,
    ContainerLimitError,
    ContainerNotFoundError,
    SubstanceNotFoundError,
)
from simplab.settings import LabSettings


class TestContainerManager(unittest.TestCase):
    def setUp(self):
        self.manager = ContainerManager()
        self.container = self.manager.new_container()
        self.cid = self.container.id

    def assertInSync(self, container):
        self.assertEqual(container.result, classify(container.contents))

    def test_new_container_defaults(self):
        self.assertEqual(self.cid, "beaker-1")
        self.assertEqual(self.container.label, "Beaker 1")
        self.assertEqual(self.container.contents, ())
        self.assertEqual(self.container.capacity, 5)
        self.assertEqual(self.container.state, ContainerState.EMPTY)
        self.assertEqual(self.container.result.type, "empty")
        self.assertAlmostEqual(self.container.visuals.fill_level, 0.5)

    def test_add_recomputes_result(self):
        self.manager.add_substance(self.cid, "HCl")
        self.assertEqual(self.container.state, ContainerState.SINGLE)
        self.manager.add_substance(self.cid, "NaOH")
        self.assertEqual(self.container.contents, ("HCl", "NaOH"))
        self.assertEqual(self.container.result.type, "neutralization")
        self.assertEqual(self.container.state, ContainerState.REACTED)
        self.assertInSync(self.container)

    def test_capacity_limit(self):
        for substance in ["H2O", "NaCl", "H2O", "NaCl", "H2O"]:
            self.manager.add_substance(self.cid, substance)
        before = self.container.result
        for _ in range(3):
            with self.assertRaises(ContainerFullError):
                self.manager.add_substance(self.cid, "HCl")
        self.assertEqual(len(self.container.contents), 5)
        self.assertIs(self.container.result, before)
        self.assertEqual(self.container.state, ContainerState.MIXTURE)

    def test_custom_capacity(self):
        manager = ContainerManager(LabSettings(max_substances_per_container=2))
        cid = manager.new_container().id
        manager.add_substance(cid, "H2O")
        manager.add_substance(cid, "H2O")
        with self.assertRaises(ContainerFullError) as ctx:
            manager.add_substance(cid, "H2O")
        self.assertEqual(ctx.exception.capacity, 2)

    def test_unknown_substance_leaves_state(self):
        self.manager.add_substance(self.cid, "NaCl")
        with self.assertRaises(SubstanceNotFoundError):
            self.manager.add_substance(self.cid, "Unobtainium")
        self.assertEqual(self.container.contents, ("NaCl",))
        self.assertInSync(self.container)

    def test_remove_last(self):
        self.manager.add_substance(self.cid, "AgNO3")
        self.manager.add_substance(self.cid, "NaCl")
        result = self.manager.remove_last(self.cid)
        self.assertEqual(self.container.contents, ("AgNO3",))
        self.assertEqual(result.type, "single")
        self.assertInSync(self.container)

    def test_remove_from_empty(self):
        result = self.manager.remove_last(self.cid)
        self.assertEqual(self.container.contents, ())
        self.assertEqual(result.type, "empty")

    def test_clear(self):
        self.manager.add_substance(self.cid, "CuSO4")
        self.manager.add_substance(self.cid, "NH3")
        result = self.manager.clear(self.cid)
        self.assertEqual(result.type, "empty")
        self.assertEqual(self.container.contents, ())
        visuals = self.container.visuals
        self.assertEqual(visuals.liquid_color, "#E8F4F8")
        self.assertAlmostEqual(visuals.fill_level, 0.5)
        self.assertFalse(visuals.show_bubbles)

    def test_visuals_follow_result(self):
        self.manager.add_substance(self.cid, "AgNO3")
        self.manager.add_substance(self.cid, "NaCl")
        visuals = self.container.visuals
        self.assertTrue(visuals.show_precipitate)
        self.assertEqual(visuals.precipitate_color, "#F5F5F5")
        self.assertAlmostEqual(visuals.fill_level, 0.5)

        self.manager.add_substance(self.cid, "H2O2")
        visuals = self.container.visuals
        # Precipitation still takes precedence over decomposition
        self.assertFalse(visuals.show_bubbles)
        self.assertAlmostEqual(visuals.fill_level, 0.6)

    def test_container_limit(self):
        for _ in range(3):
            self.manager.new_container()
        with self.assertRaises(ContainerLimitError):
            self.manager.new_container()
        self.assertEqual(len(self.manager.containers), 4)

    def test_discard_does_not_reuse_ids(self):
        second = self.manager.new_container()
        self.manager.discard(self.cid)
        third = self.manager.new_container()
        self.assertEqual(second.id, "beaker-2")
        self.assertEqual(third.id, "beaker-3")
        with self.assertRaises(ContainerNotFoundError):
            self.manager.get(self.cid)
        with self.assertRaises(ContainerNotFoundError):
            self.manager.add_substance(self.cid, "HCl")

    def test_to_dict(self):
        self.manager.add_substance(self.cid, "HCl")
        data = self.container.to_dict()
        self.assertEqual(data["contents"], ["HCl"])
        self.assertEqual(data["state"], "single")
        self.assertEqual(data["reactionResult"]["type"], "single")
        self.assertAlmostEqual(data["visuals"]["fillLevel"], 0.4)


class TestFillLevel(unittest.TestCase):
    def test_levels(self):
        self.assertAlmostEqual(fill_level(0), 0.5)
        self.assertAlmostEqual(fill_level(1), 0.4)
        self.assertAlmostEqual(fill_level(3), 0.6)
        self.assertAlmostEqual(fill_level(5), 0.8)
        self.assertAlmostEqual(fill_level(9), 0.8)


if __name__ == '__main__':
    unittest.main()
