"""Tests for ExportWorker, run synchronously in the test thread."""

import fitz
import pytest

from polymark.config import ExportConfig, RendererConfig
from polymark.core.export import ExportWorker


def run_worker(worker):
    results, messages, pages = [], [], []
    worker.finished.connect(lambda ok, msg: results.append((ok, msg)))
    worker.progress.connect(messages.append)
    worker.page_progress.connect(lambda current, total: pages.append((current, total)))
    worker.run()
    return results, messages, pages


def test_worker_exports_snapshot(qapp, pdf_path, store, tmp_path):
    output = tmp_path / "source-annotated.pdf"
    worker = ExportWorker(
        str(pdf_path), str(output), store.all_annotations(), RendererConfig(), ExportConfig()
    )

    results, messages, pages = run_worker(worker)

    assert results[0][0] is True
    assert "2 page(s)" in results[0][1]
    assert messages == ["Loading document...", "Exporting annotations..."]
    assert pages[-1] == (2, 2)
    with fitz.open(output) as doc:
        assert doc.page_count == 2


def test_snapshot_is_detached_from_store(qapp, pdf_path, store, tmp_path):
    worker = ExportWorker(str(pdf_path), str(tmp_path / "out.pdf"), store.all_annotations())
    store.clear()
    assert sum(len(anns) for anns in worker.annotations.values()) == 3


def test_worker_reports_failure(qapp, store, tmp_path):
    output = tmp_path / "out.pdf"
    worker = ExportWorker(str(tmp_path / "missing.pdf"), str(output), store.all_annotations())

    results, _, _ = run_worker(worker)

    assert results[0][0] is False
    assert results[0][1].startswith("Error during export")
    assert not output.exists()


@pytest.mark.parametrize("scale", [1.0, 2.0])
def test_worker_uses_export_scale(qapp, pdf_path, tmp_path, scale):
    output = tmp_path / "out.pdf"
    worker = ExportWorker(str(pdf_path), str(output), {}, export_config=ExportConfig(scale=scale))
    run_worker(worker)
    with fitz.open(output) as doc:
        xref = doc[0].get_images()[0][0]
        image = fitz.Pixmap(doc, xref)
        assert (image.width, image.height) == (int(200 * scale), int(300 * scale))


def test_unexpected_error_still_reports_finished(qapp, pdf_path, tmp_path, monkeypatch):
    output = tmp_path / "out.pdf"
    worker = ExportWorker(str(pdf_path), str(output), {})

    def broken_export(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(worker.exporter, "export", broken_export)
    results, _, _ = run_worker(worker)

    assert results == [(False, "Error during export: disk on fire")]
    assert not output.exists()
