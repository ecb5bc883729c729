"""
Geometry Generator Tests
========================

Validates holder brackets, the enclosure and the assembled scene.

Test Methodology:
- Verify holder meshes and their instance transforms
- Verify enclosure dimensions against the 4S2P 18650 reference
  (49.8 × 94.6 × 84.2 mm with 2 mm walls and 0.5 mm tolerance)
- Verify invalid wall/tolerance values are rejected before any geometry
- Verify scene snapshots carry every mesh type and are never patched
"""

import math
import sys
from pathlib import Path
import unittest

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.pack_modeler import (
    CatalogError,
    EnclosureConfigError,
    HolderConfigError,
    HolderSpec,
    InstancedMesh,
    ModelType,
    PackBoundingBox,
    PackParameters,
    PackTopology,
    build_scene,
    compute_pack_layout,
    generate_brackets,
    generate_enclosure,
    get_catalog_entry,
    pack_bounding_box,
)
from src.pack_modeler.geometry.enclosure import enclosure_spec
from src.pack_modeler.geometry.primitives import (
    box_mesh,
    cell_mesh,
    frame_outline,
    holder_frame_mesh,
    placement,
    rotation_y,
)

CELL, HOLDER = get_catalog_entry("18650")
REFERENCE_BBOX = pack_bounding_box(PackTopology(4, 2), CELL, HOLDER)


class TestPrimitives(unittest.TestCase):
    """Test shared meshes and transforms."""

    def test_cell_mesh_stands_on_base(self):
        mesh = cell_mesh(CELL, 24)
        low, high = mesh.bounds
        self.assertAlmostEqual(low[1], 0.0, places=6)
        self.assertAlmostEqual(high[1], CELL.height_mm, places=6)
        self.assertAlmostEqual(high[0], CELL.radius_mm, places=6)

    def test_cell_mesh_is_cached(self):
        self.assertIs(cell_mesh(CELL, 24), cell_mesh(CELL, 24))

    def test_frame_outline_reaches_rectangle(self):
        vertices, faces = frame_outline(HOLDER, 48)
        n = len(vertices) // 2
        hole, outline = vertices[:n], vertices[n:]
        np.testing.assert_allclose(np.linalg.norm(hole, axis=1), HOLDER.hole_radius_mm)
        self.assertAlmostEqual(outline[:, 0].max(), HOLDER.outer_width_mm / 2.0)
        self.assertAlmostEqual(outline[:, 1].min(), -HOLDER.outer_depth_mm / 2.0)
        self.assertEqual(len(faces), 2 * n)

    def test_holder_frame_bounds(self):
        mesh = holder_frame_mesh(HOLDER, 8.0, 48)
        np.testing.assert_allclose(
            mesh.bounds,
            [[-11.2, -4.0, -11.2], [11.2, 4.0, 11.2]],
            atol=1e-6,
        )

    def test_holder_frame_has_hole(self):
        mesh = holder_frame_mesh(HOLDER, 8.0, 48)
        # No vertex lies inside the cutout
        radial = np.hypot(mesh.vertices[:, 0], mesh.vertices[:, 2])
        self.assertGreaterEqual(radial.min(), HOLDER.hole_radius_mm - 1e-6)

    def test_placement(self):
        matrix = placement((1.0, 2.0, 3.0), math.pi / 2.0)
        np.testing.assert_allclose(matrix[:3, 3], [1.0, 2.0, 3.0])
        np.testing.assert_allclose(matrix[:3, :3], rotation_y(math.pi / 2.0)[:3, :3], atol=1e-12)

    def test_instanced_mesh_transforms_read_only(self):
        instanced = InstancedMesh("box", box_mesh((1, 1, 1)), [np.eye(4), np.eye(4)])
        self.assertEqual(instanced.count, 2)
        self.assertEqual(instanced.triangle_count, 24)
        with self.assertRaises(ValueError):
            instanced.transforms[0, 0, 0] = 5.0

    def test_instanced_mesh_empty_and_bad_shape(self):
        empty = InstancedMesh("none", box_mesh((1, 1, 1)), [])
        self.assertTrue(empty.is_empty)
        self.assertEqual(empty.transforms.shape, (0, 4, 4))
        with self.assertRaises(ValueError):
            InstancedMesh("bad", box_mesh((1, 1, 1)), np.zeros((2, 3, 3)))


class TestBrackets(unittest.TestCase):
    """Test holder bracket generation."""

    def setUp(self):
        self.layout = compute_pack_layout(PackTopology(4, 2), CELL, HOLDER)
        self.brackets = generate_brackets(self.layout, HOLDER)

    def test_one_frame_and_two_teeth_per_cell(self):
        self.assertEqual(self.brackets.count, 8)
        self.assertEqual(self.brackets.teeth_right.count, 8)
        self.assertEqual(self.brackets.teeth_top.count, 8)

    def test_frames_share_one_mesh(self):
        self.assertIs(self.brackets.frames.mesh, holder_frame_mesh(HOLDER, 8.0, 48))

    def test_frame_positions_follow_cells(self):
        for instance, transform in zip(self.layout.cells, self.brackets.frames.transforms):
            x, _, z = instance.position
            np.testing.assert_allclose(transform[:3, 3], [x, 4.0, z])

    def test_tooth_offsets(self):
        cell = self.layout.cells[0]
        right = self.brackets.teeth_right.transforms[0]
        top = self.brackets.teeth_top.transforms[0]
        self.assertAlmostEqual(right[0, 3], cell.position[0] + 11.2)
        self.assertAlmostEqual(top[2, 3], cell.position[2] + 11.2)
        np.testing.assert_allclose(top[:3, :3], rotation_y(math.pi / 2.0)[:3, :3], atol=1e-12)

    def test_tooth_size(self):
        extents = self.brackets.teeth_right.mesh.extents
        np.testing.assert_allclose(extents, [1.5, 8.0, 22.4 / 2.5])

    def test_empty_layout_gives_no_instances(self):
        empty = compute_pack_layout(PackTopology(0, 2), CELL, HOLDER)
        brackets = generate_brackets(empty, HOLDER)
        self.assertEqual(brackets.count, 0)

    def test_holder_too_small_rejected(self):
        holder = HolderSpec(hole_diameter_mm=20.0, outer_width_mm=18.0, outer_depth_mm=18.0)
        with self.assertRaises(HolderConfigError):
            generate_brackets(self.layout, holder)


class TestEnclosure(unittest.TestCase):
    """Test enclosure dimensions and panels."""

    def setUp(self):
        self.enclosure = generate_enclosure(REFERENCE_BBOX, 2.0, 0.5)
        self.spec = self.enclosure.spec

    def test_reference_outer_dimensions(self):
        self.assertAlmostEqual(self.spec.outer_width_mm, 49.8)
        self.assertAlmostEqual(self.spec.outer_length_mm, 94.6)
        self.assertAlmostEqual(self.spec.outer_height_mm, 84.2)

    def test_inner_dimensions(self):
        self.assertAlmostEqual(self.spec.inner_width_mm, 45.8)
        self.assertAlmostEqual(self.spec.inner_length_mm, 90.6)
        self.assertAlmostEqual(self.spec.inner_height_mm, 82.2)

    def test_outer_equals_pack_plus_tolerance_and_walls(self):
        for wall, tol in [(1.2, 0.0), (3.0, 1.0), (2.0, 0.25)]:
            spec = enclosure_spec(REFERENCE_BBOX, wall, tol)
            self.assertAlmostEqual(spec.outer_width_mm, REFERENCE_BBOX.width_mm + 2 * tol + 2 * wall)
            self.assertAlmostEqual(spec.outer_length_mm, REFERENCE_BBOX.length_mm + 2 * tol + 2 * wall)
            self.assertAlmostEqual(spec.outer_height_mm, REFERENCE_BBOX.height_mm + 2 * tol + wall)

    def test_six_panels(self):
        names = [panel.name for panel in self.enclosure.panels]
        self.assertEqual(names, ["bottom", "front", "back", "left", "right", "lid"])

    def test_panel_placement(self):
        bottom = self.enclosure.panel("bottom")
        self.assertEqual(bottom.extents, (49.8, 94.6, 2.0))
        self.assertAlmostEqual(bottom.center[2], -84.2 / 2 + 1.0)

        front = self.enclosure.panel("front")
        self.assertAlmostEqual(front.center[1], 94.6 / 2 - 1.0)
        self.assertAlmostEqual(front.extents[2], 82.2)

        left = self.enclosure.panel("left")
        self.assertAlmostEqual(left.center[0], -(49.8 / 2 - 1.0))
        self.assertAlmostEqual(left.extents[1], 90.6)

    def test_lid_beside_body(self):
        lid = self.enclosure.panel("lid")
        self.assertAlmostEqual(lid.center[0], 49.8 + 10.0)
        self.assertEqual(lid.extents, (49.8, 94.6, 2.0))

    def test_panel_lookup_unknown(self):
        with self.assertRaises(KeyError):
            self.enclosure.panel("top")

    def test_meshes_match_panels(self):
        meshes = self.enclosure.meshes()
        self.assertEqual(len(meshes), 6)
        for mesh, panel in zip(meshes, self.enclosure.panels):
            self.assertEqual(mesh.role, "enclosure")
            np.testing.assert_allclose(mesh.mesh.extents, panel.extents)
            np.testing.assert_allclose(mesh.transforms[0][:3, 3], panel.center)

    def test_zero_tolerance_allowed(self):
        spec = generate_enclosure(REFERENCE_BBOX, 2.0, 0.0).spec
        self.assertAlmostEqual(spec.inner_width_mm, REFERENCE_BBOX.width_mm)

    def test_invalid_wall_rejected(self):
        for wall in (0.0, -1.0, float("nan")):
            with self.assertRaises(EnclosureConfigError):
                generate_enclosure(REFERENCE_BBOX, wall, 0.5)

    def test_negative_tolerance_rejected(self):
        with self.assertRaises(EnclosureConfigError):
            generate_enclosure(REFERENCE_BBOX, 2.0, -0.1)

    def test_flat_pack_rejected(self):
        with self.assertRaises(EnclosureConfigError):
            generate_enclosure(PackBoundingBox(0.0, 44.8, 81.2), 2.0, 0.5)


class TestSceneAssembly(unittest.TestCase):
    """Test full scene snapshots."""

    def setUp(self):
        self.params = PackParameters(cell_family="18650", series=4, parallel=2)
        self.snapshot = build_scene(self.params, generation=3)

    def test_mesh_names(self):
        names = [mesh.name for mesh in self.snapshot.meshes]
        self.assertEqual(names, [
            "cells",
            "bracket_frames",
            "bracket_teeth_right",
            "bracket_teeth_top",
            "parallel_strips",
            "series_strips",
            "terminal_positive",
            "terminal_negative",
        ])

    def test_instance_counts(self):
        counts = self.snapshot.instance_counts()
        self.assertEqual(counts["cells"], 8)
        self.assertEqual(counts["bracket_frames"], 8)
        self.assertEqual(counts["parallel_strips"], 4)
        self.assertEqual(counts["series_strips"], 3)
        self.assertEqual(counts["terminal_positive"], 1)
        self.assertEqual(counts["terminal_negative"], 1)

    def test_one_shared_mesh_per_type(self):
        cells = self.snapshot.mesh("cells")
        self.assertEqual(len(cells.mesh.faces) * 8, cells.triangle_count)

    def test_strip_sizes(self):
        parallel = self.snapshot.mesh("parallel_strips").mesh.extents
        np.testing.assert_allclose(parallel, [44.8, 0.5, 18.5 * 0.75])
        terminal = self.snapshot.mesh("terminal_negative").mesh.extents
        np.testing.assert_allclose(terminal, [11.2, 2.0, 18.5 * 0.75])

    def test_generation_and_enclosure(self):
        self.assertEqual(self.snapshot.generation, 3)
        self.assertAlmostEqual(self.snapshot.enclosure.spec.outer_height_mm, 84.2)

    def test_meshes_for_model_type(self):
        enclosure = self.snapshot.meshes_for(ModelType.ENCLOSURE)
        self.assertEqual(len(enclosure), 6)
        brackets = self.snapshot.meshes_for("bracket")
        self.assertEqual([m.name for m in brackets], [
            "bracket_frames", "bracket_teeth_right", "bracket_teeth_top",
        ])

    def test_hidden_brackets(self):
        snapshot = build_scene(self.params.with_changes(show_brackets=False))
        names = [m.name for m in snapshot.visible_meshes()]
        self.assertNotIn("bracket_frames", names)
        self.assertAlmostEqual(snapshot.bounding_box.height_mm, 65.2)
        # Holders are still built for export
        self.assertEqual(len(snapshot.meshes_for(ModelType.BRACKET)), 3)

    def test_empty_topology(self):
        snapshot = build_scene(self.params.with_changes(series=0))
        self.assertTrue(snapshot.is_empty)
        self.assertTrue(snapshot.reason)
        self.assertIsNone(snapshot.enclosure)
        self.assertEqual(snapshot.meshes_for(ModelType.ENCLOSURE), ())

    def test_invalid_wall_raises(self):
        with self.assertRaises(EnclosureConfigError):
            build_scene(self.params.with_changes(wall_thickness_mm=0.0))

    def test_unknown_family_raises(self):
        with self.assertRaises(CatalogError):
            PackParameters(cell_family="14500")

    def test_rebuild_is_deterministic(self):
        other = build_scene(self.params, generation=3)
        for a, b in zip(self.snapshot.meshes, other.meshes):
            self.assertEqual(a.name, b.name)
            np.testing.assert_array_equal(a.transforms, b.transforms)


if __name__ == "__main__":
    unittest.main()
