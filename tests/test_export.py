"""
Export Tests
============

Validates the binary STL serializer and the SVG layout projector.

Test Methodology:
- Verify the binary STL byte layout (header, count, 50-byte records)
- Verify instance transforms are baked into exported vertices
- Verify empty exports fail without writing anything
- Verify the SVG viewport equals the padded holder grid
"""

import math
import struct
import sys
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
import unittest

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.pack_modeler import (
    InstancedMesh,
    ModelType,
    NoGeometryError,
    PackParameters,
    PackTopology,
    build_scene,
    get_catalog_entry,
    project_layout,
    serialize_stl,
    write_stl,
)
from src.pack_modeler.export.stl import Y_UP_TO_Z_UP, flatten_instances, triangle_count
from src.pack_modeler.export.svg import fmt
from src.pack_modeler.geometry.primitives import box_mesh, translation

SVG = "{http://www.w3.org/2000/svg}"


def unit_boxes(*offsets):
    transforms = [translation(*offset) for offset in offsets]
    return InstancedMesh("boxes", box_mesh((1.0, 1.0, 1.0)), transforms)


class TestFlattenInstances(unittest.TestCase):
    """Test triangle baking."""

    def test_triangle_count(self):
        triangles = flatten_instances([unit_boxes((0, 0, 0), (5, 0, 0), (0, 5, 0))])
        self.assertEqual(triangles.shape, (36, 3, 3))

    def test_translation_baked(self):
        triangles = flatten_instances([unit_boxes((10.0, 0.0, 0.0))])
        points = triangles.reshape(-1, 3)
        self.assertAlmostEqual(points[:, 0].min(), 9.5)
        self.assertAlmostEqual(points[:, 0].max(), 10.5)

    def test_instances_in_order(self):
        triangles = flatten_instances([unit_boxes((0, 0, 0), (100.0, 0, 0))])
        self.assertLess(triangles[:12, :, 0].max(), 1.0)
        self.assertGreater(triangles[12:, :, 0].min(), 99.0)

    def test_global_transform_applied_after(self):
        triangles = flatten_instances([unit_boxes((0.0, 10.0, 0.0))], Y_UP_TO_Z_UP)
        points = triangles.reshape(-1, 3)
        # Scene height (Y) becomes print height (Z)
        self.assertAlmostEqual(points[:, 2].min(), 9.5)
        self.assertAlmostEqual(points[:, 1].max(), 0.5)

    def test_y_up_to_z_up(self):
        np.testing.assert_allclose(Y_UP_TO_Z_UP[:3, :3] @ [0.0, 1.0, 0.0], [0.0, 0.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(Y_UP_TO_Z_UP[:3, :3] @ [0.0, 0.0, 1.0], [0.0, -1.0, 0.0], atol=1e-12)

    def test_empty_inputs(self):
        empty = InstancedMesh("none", box_mesh((1, 1, 1)), [])
        self.assertEqual(flatten_instances([]).shape, (0, 3, 3))
        self.assertEqual(flatten_instances([empty]).shape, (0, 3, 3))


class TestSerializeSTL(unittest.TestCase):
    """Test binary STL layout."""

    def test_byte_layout(self):
        data = serialize_stl([unit_boxes((0, 0, 0), (3, 0, 0))])
        count = struct.unpack("<I", data[80:84])[0]
        self.assertEqual(count, 24)
        self.assertEqual(len(data), 84 + 50 * count)

    def test_record_vertices(self):
        data = serialize_stl([unit_boxes((20.0, 0.0, 0.0))])
        record = struct.unpack("<12fH", data[84:134])
        vertices = np.array(record[3:12]).reshape(3, 3)
        self.assertTrue(np.all(vertices[:, 0] >= 19.5 - 1e-6))
        self.assertTrue(np.all(vertices[:, 0] <= 20.5 + 1e-6))
        self.assertEqual(record[12], 0)

    def test_record_normal_is_unit(self):
        data = serialize_stl([unit_boxes((0, 0, 0))])
        normal = struct.unpack("<3f", data[84:96])
        self.assertAlmostEqual(math.sqrt(sum(n * n for n in normal)), 1.0, places=5)

    def test_enclosure_export(self):
        snapshot = build_scene(PackParameters(series=4, parallel=2))
        meshes = snapshot.meshes_for(ModelType.ENCLOSURE)
        data = serialize_stl(meshes)
        self.assertEqual(struct.unpack("<I", data[80:84])[0], 6 * 12)

    def test_bracket_export_count(self):
        snapshot = build_scene(PackParameters(series=2, parallel=2))
        meshes = snapshot.meshes_for(ModelType.BRACKET)
        data = serialize_stl(meshes, Y_UP_TO_Z_UP)
        self.assertEqual(struct.unpack("<I", data[80:84])[0], triangle_count(meshes))

    def test_empty_raises(self):
        with self.assertRaises(NoGeometryError) as ctx:
            serialize_stl([])
        self.assertEqual(str(ctx.exception), "No geometry available to export")

    def test_zero_instances_raises(self):
        with self.assertRaises(NoGeometryError):
            serialize_stl([InstancedMesh("none", box_mesh((1, 1, 1)), [])])

    def test_write_stl(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_stl(Path(tmp) / "out" / "boxes.stl", [unit_boxes((0, 0, 0))])
            self.assertTrue(path.exists())
            self.assertEqual(path.stat().st_size, 84 + 50 * 12)

    def test_write_stl_nothing_written_when_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "empty.stl"
            with self.assertRaises(NoGeometryError):
                write_stl(path, [])
            self.assertFalse(path.exists())


class TestLayoutProjector(unittest.TestCase):
    """Test the SVG layout drawing."""

    def setUp(self):
        self.cell, self.holder = get_catalog_entry("18650")
        self.drawing = project_layout(PackTopology(4, 2), self.cell, self.holder)
        self.root = ET.fromstring(self.drawing.to_svg())

    def test_viewport_matches_grid(self):
        self.assertAlmostEqual(self.drawing.width_mm, 84.8)
        self.assertAlmostEqual(self.drawing.height_mm, 129.6)
        self.assertEqual(self.root.get("width"), "84.8mm")
        self.assertEqual(self.root.get("height"), "129.6mm")
        self.assertEqual(self.root.get("viewBox"), "0 0 84.8 129.6")

    def test_viewport_invariant(self):
        for family in ("18650", "21700", "26650", "32700"):
            cell, holder = get_catalog_entry(family)
            for series, parallel in [(1, 1), (3, 5), (7, 2)]:
                drawing = project_layout(PackTopology(series, parallel), cell, holder, padding_mm=15)
                self.assertAlmostEqual(drawing.width_mm, parallel * holder.outer_width_mm + 30)
                self.assertAlmostEqual(drawing.height_mm, series * holder.outer_depth_mm + 30)

    def test_padding_group(self):
        group = self.root.find(f"{SVG}g")
        self.assertEqual(group.get("transform"), "translate(20, 20)")

    def test_one_circle_and_rect_per_cell(self):
        circles = self.root.findall(f".//{SVG}circle")
        rects = self.root.findall(f".//{SVG}rect")
        self.assertEqual(len(circles), 8)
        self.assertEqual(len(rects), 8)

    def test_circle_geometry(self):
        first = self.root.findall(f".//{SVG}circle")[0]
        self.assertAlmostEqual(float(first.get("cx")), 11.2)
        self.assertAlmostEqual(float(first.get("cy")), 11.2)
        self.assertAlmostEqual(float(first.get("r")), 9.25)
        last = self.drawing.circles[-1]
        self.assertAlmostEqual(last.cx, 33.6)
        self.assertAlmostEqual(last.cy, 78.4)

    def test_dimension_labels(self):
        labels = [text.text for text in self.root.findall(f".//{SVG}text")]
        self.assertIn("44.8mm", labels)
        self.assertIn("89.6mm", labels)

    def test_dimension_labels_centered(self):
        texts = self.root.findall(f".//{SVG}g[@class='dimensions']/{SVG}text")
        self.assertEqual([t.get("text-anchor") for t in texts], ["middle", "middle"])
        self.assertIsNone(texts[0].get("writing-mode"))
        self.assertEqual(texts[1].get("writing-mode"), "vertical-rl")

    def test_dimension_lines(self):
        paths = self.root.findall(f".//{SVG}g[@class='dimensions']/{SVG}path")
        self.assertEqual(len(paths), 2)
        self.assertEqual(paths[0].get("d"), "M 0 94.6 L 44.8 94.6")
        self.assertEqual(paths[1].get("d"), "M 49.8 0 L 49.8 89.6")
        self.assertEqual(paths[0].get("marker-end"), "url(#arrow)")

    def test_arrow_marker_defined(self):
        marker = self.root.find(f"{SVG}defs/{SVG}marker")
        self.assertEqual(marker.get("id"), "arrow")
        self.assertEqual(marker.get("orient"), "auto-start-reverse")

    def test_description_with_height(self):
        drawing = project_layout(PackTopology(4, 2), self.cell, self.holder, overall_height_mm=81.2)
        self.assertIn("81.2mm", drawing.description)
        self.assertIn("4S2P 18650", drawing.to_svg())

    def test_write(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self.drawing.write(Path(tmp) / "pack.svg")
            self.assertEqual(path.read_text(encoding="utf-8"), self.drawing.to_svg())

    def test_unbuildable_topology_raises(self):
        with self.assertRaises(NoGeometryError):
            project_layout(PackTopology(0, 2), self.cell, self.holder)

    def test_number_format(self):
        self.assertEqual(fmt(84.8), "84.8")
        self.assertEqual(fmt(20.0), "20")
        self.assertEqual(fmt(129.60000000000002), "129.6")
        self.assertEqual(fmt(-0.0001), "0")


if __name__ == "__main__":
    unittest.main()
