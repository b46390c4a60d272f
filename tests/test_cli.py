import json
import os

import pytest

from mandelanim.cli import main
from mandelanim.renderers.gpu import cuda_status

BASE = ["--renderer", "cpu", "--workers", "1", "--log-file", ""]


def _render_args(out_dir, *extra):
    return BASE + [
        "render",
        "--width", "8",
        "--height", "6",
        "--frames", "2",
        "--max-iter", "20",
        "--out-dir", str(out_dir),
        "--no-progress-bar",
        *extra,
    ]


def test_render_command(tmp_path, capsys):
    out_dir = tmp_path / "frames"
    assert main(_render_args(out_dir, "--fps", "24")) == 0

    out = capsys.readouterr().out
    assert f"frame 1/2 -> {out_dir / 'frame_000000.png'}" in out
    assert f"frame 2/2 -> {out_dir / 'frame_000001.png'}" in out
    assert "ffmpeg example:" in out
    assert f"ffmpeg -framerate 24 -i {out_dir}/frame_%06d.png -c:v libx264 -pix_fmt yuv420p out/mandelbrot.mp4" in out

    with open(out_dir / "run.json", encoding="utf-8") as f:
        manifest = json.load(f)
    assert manifest["config"]["width"] == 8
    assert manifest["config"]["fps"] == 24
    assert manifest["renderer"]["resolved"] == "cpu"
    assert "numpy" in manifest["packages"]


def test_render_without_manifest(tmp_path):
    out_dir = tmp_path / "frames"
    assert main(_render_args(out_dir, "--manifest", "")) == 0
    assert sorted(os.listdir(out_dir)) == ["frame_000000.png", "frame_000001.png"]


def test_render_with_config_file(tmp_path):
    cfg_path = tmp_path / "cfg.json"
    out_dir = tmp_path / "from_config"
    cfg_path.write_text(json.dumps({"width": 4, "height": 4, "frames": 1, "max_iter": 10, "out_dir": str(out_dir)}))
    assert main(["--config", str(cfg_path)] + BASE + ["render", "--no-progress-bar"]) == 0
    assert os.path.exists(out_dir / "frame_000000.png")


def test_output_setup_failure_exit_code(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    assert main(_render_args(blocker / "frames")) == 1


def test_invalid_config_exit_code(tmp_path):
    args = BASE + ["render", "--width", "0", "--out-dir", str(tmp_path)]
    assert main(args) == 1


def test_clean_command(tmp_path, capsys):
    out_dir = tmp_path / "frames"
    assert main(_render_args(out_dir)) == 0
    capsys.readouterr()

    assert main(BASE + ["clean", "--out-dir", str(out_dir)]) == 0
    assert "removed 2 frame(s)" in capsys.readouterr().out
    assert os.listdir(out_dir) == ["run.json"]


def test_unknown_renderer_is_usage_error():
    with pytest.raises(SystemExit) as exc:
        main(["--renderer", "opengl", "render"])
    assert exc.value.code == 2


def test_manifest_write_failure_exit_code(tmp_path):
    out_dir = tmp_path / "frames"
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    assert main(_render_args(out_dir, "--manifest", str(blocker / "run.json"))) == 1
    assert sorted(os.listdir(out_dir)) == ["frame_000000.png", "frame_000001.png"]


def test_clean_failure_exit_code(tmp_path):
    (tmp_path / "frame_x.png").mkdir()
    assert main(BASE + ["clean", "--out-dir", str(tmp_path)]) == 1


@pytest.mark.skipif(cuda_status().get("available"), reason="CUDA is available")
def test_gpu_without_cuda_exit_code(tmp_path):
    out_dir = tmp_path / "frames"
    args = ["--renderer", "gpu", "--log-file", "", "render", "--width", "4", "--height", "4",
            "--frames", "1", "--out-dir", str(out_dir), "--no-progress-bar"]
    assert main(args) == 1
    assert not out_dir.exists()
