"""Tests for the command-line entry point and demo scenes."""

import random

import pytest

import main
from geometry.sphere import Sphere
from materials.dielectric import Dielectric
from materials.lambertian import Lambertian
from materials.metal import Metal


class TestCreateWorld:
    """Tests for the demo scene builders."""

    def test_empty(self):
        assert len(main.create_world("empty")) == 0

    def test_three(self):
        world = main.create_world("three")
        assert len(world) == 4
        assert all(isinstance(obj, Sphere) for obj in world.objects)

    def test_final_has_every_material_kind(self):
        world = main.create_world("final", random.Random(0))
        kinds = {type(obj.material) for obj in world.objects}
        assert {Lambertian, Metal, Dielectric} <= kinds
        assert len(world) > 100

    def test_final_is_reproducible(self):
        a = main.create_world("final", random.Random(3))
        b = main.create_world("final", random.Random(3))
        assert [o.center for o in a.objects] == [o.center for o in b.objects]

    def test_unknown_scene(self):
        with pytest.raises(ValueError):
            main.create_world("cornell")


class TestCli:
    """End-to-end runs of the command-line entry point."""

    def test_quality_preset_and_overrides(self):
        args = main.parse_args(["--quality", "preview", "--max-depth", "3"])
        cam = main.build_camera(args)
        assert cam.samples_per_pixel == main.QUALITY_LEVELS["preview"]["samples"]
        assert cam.max_depth == 3

    def test_renders_tiny_image(self, tmp_path):
        out = tmp_path / "tiny.ppm"
        code = main.main([
            "--scene", "three", "--width", "6", "--aspect-ratio", "1.5",
            "--samples", "1", "--max-depth", "3", "--workers", "2",
            "--backend", "thread", "--seed", "1", "--output", str(out),
        ])
        assert code == 0
        lines = out.read_text().splitlines()
        assert lines[:3] == ["P3", "6 4", "255"]
        assert len(lines) == 3 + 24
        for line in lines[3:]:
            values = [int(v) for v in line.split()]
            assert len(values) == 3
            assert all(0 <= v <= 255 for v in values)

    def test_binary_output(self, tmp_path):
        out = tmp_path / "tiny.ppm"
        code = main.main([
            "--scene", "empty", "--width", "4", "--aspect-ratio", "2",
            "--samples", "1", "--workers", "1", "--binary", "--output", str(out),
        ])
        assert code == 0
        data = out.read_bytes()
        assert data.startswith(b"P6\n4 2\n255\n")
        assert len(data) == len(b"P6\n4 2\n255\n") + 4 * 2 * 3

    def test_unwritable_output_exits_nonzero(self, tmp_path):
        code = main.main([
            "--scene", "empty", "--width", "2", "--samples", "1", "--workers", "1",
            "--output", str(tmp_path / "nope" / "img.ppm"),
        ])
        assert code == 1
