"""Tests for the command line entry point."""

import json
import numpy as np
import pytest
from PIL import Image

import main


class TestMain:
    """Test main.main()."""

    def test_renders_builtin_scene(self, tmp_path, capsys):
        output = tmp_path / "out" / "render.png"
        code = main.main([
            '--width', '8', '--height', '4', '--samples', '1',
            '--threads', '1', '--seed', '3', '--output', str(output)
        ])

        assert code == 0
        assert output.exists()
        assert Image.open(output).size == (8, 4)

        out = capsys.readouterr().out
        assert "Total Time" in out
        assert "Total Rays" in out
        assert "Rays per second" in out

    def test_seeded_runs_match(self, tmp_path):
        args = ['--scene', 'ground', '--width', '6', '--height', '6', '--samples', '2', '--seed', '8']
        a = tmp_path / "a.png"
        b = tmp_path / "b.png"

        assert main.main(args + ['--threads', '1', '--output', str(a)]) == 0
        assert main.main(args + ['--threads', '3', '--output', str(b)]) == 0

        assert np.array_equal(np.asarray(Image.open(a)), np.asarray(Image.open(b)))

    def test_scene_file_with_overrides(self, tmp_path, monkeypatch):
        scene = {
            'render': {'width': 50, 'height': 50, 'samples': 10},
            'materials': {'m': {'type': 'lambertian', 'albedo': [0.5, 0.5, 0.5]}},
            'objects': [{'center': [0, 0, -1], 'radius': 0.5, 'material': 'm'}],
            'camera': {'look_from': [0, 0, 0], 'look_at': [0, 0, -1]},
        }
        scene_path = tmp_path / "scene.json"
        scene_path.write_text(json.dumps(scene))
        output = tmp_path / "scene.png"

        cameras = []
        original_render = main.Renderer.render

        def recording_render(renderer, world, camera):
            cameras.append(camera)
            return original_render(renderer, world, camera)

        monkeypatch.setattr(main.Renderer, 'render', recording_render)

        code = main.main([
            '--scene-file', str(scene_path), '--width', '5', '--height', '3',
            '--samples', '1', '--threads', '1', '--output', str(output)
        ])

        assert code == 0
        assert Image.open(output).size == (5, 3)
        # The camera follows the overridden image size, not the file's 50x50
        camera = cameras[0]
        assert abs(camera.horizontal.length() / camera.vertical.length() - 5 / 3) < 1e-9

    def test_bad_scene_file(self, tmp_path, capsys):
        code = main.main(['--scene-file', str(tmp_path / "missing.json"), '--output', str(tmp_path / "x.png")])
        assert code == 1
        assert "not found" in capsys.readouterr().err

    @pytest.mark.parametrize("scene", [
        {'objects': ['sphere']},
        {'materials': {'m': 'lambertian'}},
        {'camera': {'look_from': [0, 5, 0], 'look_at': [0, 0, 0]}},
    ])
    def test_malformed_scene_file(self, tmp_path, capsys, scene):
        scene_path = tmp_path / "bad.json"
        scene_path.write_text(json.dumps(scene))

        code = main.main(['--scene-file', str(scene_path), '--output', str(tmp_path / "x.png")])

        assert code == 1
        assert capsys.readouterr().err.startswith("Error: ")
        assert not (tmp_path / "x.png").exists()

    def test_negative_threads_rejected(self, tmp_path, capsys):
        code = main.main(['--threads', '-1', '--output', str(tmp_path / "x.png")])
        assert code == 1
        assert "num_threads" in capsys.readouterr().err

    def test_invalid_settings(self, tmp_path, capsys):
        code = main.main(['--samples', '0', '--output', str(tmp_path / "x.png")])
        assert code == 1
        assert "samples_per_pixel" in capsys.readouterr().err

    def test_unknown_scene_rejected(self):
        with pytest.raises(SystemExit):
            main.main(['--scene', 'nebula'])
