import os

import numpy as np
import pytest
from PIL import Image

from mandelanim import pipeline
from mandelanim.animation import FIXED_PATH
from mandelanim.errors import EncodeError, OutputSetupError, RendererUnavailableError
from mandelanim.renderers.cpu import render_frame_cpu
from mandelanim.renderers.gpu import cuda_status


def _cfg(out_dir, **kw):
    cfg = {
        "width": 8,
        "height": 6,
        "frames": 3,
        "fps": 30,
        "max_iter": 30,
        "zoom_start": 1.0,
        "zoom_end": 1e-3,
        "out_dir": str(out_dir),
    }
    cfg.update(kw)
    return cfg


def _run(cfg):
    return pipeline.render_sequence(cfg=cfg, renderer="cpu", workers=1, progress=False)


def test_render_sequence_writes_frames_in_order(tmp_path, capsys):
    out_dir = tmp_path / "frames"
    summary = _run(_cfg(out_dir))

    names = [f"frame_{i:06d}.png" for i in range(3)]
    assert summary["frames"] == 3
    assert summary["renderer"] == "cpu"
    assert summary["paths"] == [str(out_dir / n) for n in names]
    assert sorted(os.listdir(out_dir)) == names

    lines = capsys.readouterr().out.splitlines()
    assert lines == [f"frame {i + 1}/3 -> {out_dir / n}" for i, n in enumerate(names)]


def test_first_frame_is_centered_on_first_anchor(tmp_path):
    out_dir = tmp_path / "frames"
    _run(_cfg(out_dir))
    expected = render_frame_cpu(center=FIXED_PATH[0], zoom=1.0, width=8, height=6, max_iter=30, workers=1)
    with Image.open(out_dir / "frame_000000.png") as img:
        np.testing.assert_array_equal(np.asarray(img), expected)


def test_zero_frames_renders_one(tmp_path):
    summary = _run(_cfg(tmp_path, frames=0))
    assert summary["frames"] == 1
    assert os.listdir(tmp_path) == ["frame_000000.png"]


def test_output_setup_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    with pytest.raises(OutputSetupError):
        _run(_cfg(blocker / "frames"))


def test_sink_failure_aborts_and_keeps_written_frames(tmp_path, monkeypatch):
    real_save = pipeline.save_frame

    def failing_save(buf, out_dir, frame_index):
        if frame_index == 1:
            raise EncodeError("disk full")
        return real_save(buf, out_dir, frame_index)

    monkeypatch.setattr(pipeline, "save_frame", failing_save)
    with pytest.raises(EncodeError):
        _run(_cfg(tmp_path))
    assert os.listdir(tmp_path) == ["frame_000000.png"]


def test_choose_renderer():
    assert pipeline.choose_renderer("cpu") == "cpu"
    assert pipeline.choose_renderer("numba") == "numba"
    assert pipeline.choose_renderer("auto") in ("numba", "gpu")
    with pytest.raises(ValueError):
        pipeline.choose_renderer("opengl")


def test_render_frame_unknown_renderer():
    with pytest.raises(ValueError):
        pipeline.render_frame(renderer="auto", center=FIXED_PATH[0], zoom=1.0, width=2, height=2, max_iter=5)


def test_ffmpeg_hint():
    assert pipeline.ffmpeg_hint("out/frames", 30) == (
        "ffmpeg -framerate 30 -i out/frames/frame_%06d.png -c:v libx264 -pix_fmt yuv420p out/mandelbrot.mp4"
    )


@pytest.mark.skipif(cuda_status().get("available"), reason="CUDA is available")
def test_gpu_request_without_cuda_fails_before_output(tmp_path):
    with pytest.raises(RendererUnavailableError):
        pipeline.choose_renderer("gpu")
    out_dir = tmp_path / "frames"
    with pytest.raises(RuntimeError):
        pipeline.render_sequence(cfg=_cfg(out_dir), renderer="gpu", progress=False)
    assert not out_dir.exists()
