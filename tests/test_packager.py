import asyncio
from datetime import datetime, timezone

from docmark.models import NOT_APPLICABLE, Anchor, DownloadPlan, ImageBytes, WatermarkSpec
from docmark.services.packager import deliver, package, persist_settings, settings_key
from docmark.services.style_generator import generate
from docmark.storage.downloads import CollectingSink


def _image(number, fmt="PNG"):
    return ImageBytes(page_number=number, data=f"page{number}".encode(), format=fmt)


def test_single_result_keeps_the_original_name():
    plan = package([_image(1)], "scan.png")
    assert plan.filenames == ["watermarked_scan.png"]
    assert plan.artifacts[0].delay_ms == 0
    assert not plan.is_settings_only


def test_single_result_accepts_jpeg_spellings():
    assert package([_image(1, "JPEG")], "photo.jpeg").filenames == ["watermarked_photo.jpeg"]


def test_single_result_with_a_mismatched_extension_is_renamed():
    assert package([_image(1)], "contract.pdf").filenames == ["watermarked_contract.png"]


def test_multiple_results_are_numbered_and_staggered():
    plan = package([_image(1), _image(2), _image(3)], "report.final.pdf", delay_ms=500)
    assert plan.filenames == [
        "watermarked_report.final_page1.png",
        "watermarked_report.final_page2.png",
        "watermarked_report.final_page3.png",
    ]
    assert [artifact.delay_ms for artifact in plan.artifacts] == [0, 500, 500]


def test_not_applicable_results_produce_no_artifacts():
    plan = package([NOT_APPLICABLE], "memo.docx")
    assert plan.artifacts == []


def test_persist_settings_writes_every_field(store):
    spec = WatermarkSpec(text="INTERNAL", anchor=Anchor.TOP, page_range="1-10")
    style = generate(spec.text, spec.anchor, "doc-42", "user-7")
    created = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    key = persist_settings(
        store, spec, document_id="doc-42", user_id="user-7", generated_style=style, is_locked=True, created_at=created
    )

    assert key == settings_key("doc-42") == "watermark-doc-42"
    record = store.get(key)
    assert set(record) == {
        "documentId", "text", "location", "opacity", "rotation", "font", "fontSize",
        "color", "pageRange", "generatedStyle", "isLocked", "createdBy", "createdAt",
    }
    assert record["documentId"] == "doc-42"
    assert record["location"] == "Top"
    assert record["pageRange"] == "1-10"
    assert record["isLocked"] is True
    assert record["createdBy"] == "user-7"
    assert record["createdAt"].startswith("2026-01-02T03:04:05")
    assert record["generatedStyle"]["seed"] == style.seed
    assert set(record["generatedStyle"]) == {
        "fontFamily", "fontSize", "color", "opacity", "rotation", "xOffset", "yOffset", "seed", "mode",
    }
    assert record["generatedStyle"]["xOffset"] == style.offset_x


def test_deliver_waits_between_downloads():
    waits = []

    async def fake_sleep(seconds):
        waits.append(seconds)

    sink = CollectingSink()
    plan = package([_image(1), _image(2), _image(3)], "report.pdf", delay_ms=500)
    count = asyncio.run(deliver(plan, sink, sleep=fake_sleep))

    assert count == 3
    assert [artifact.filename for artifact in sink.artifacts] == plan.filenames
    assert waits == [0.5, 0.5]


def test_deliver_empty_plan_triggers_nothing():
    sink = CollectingSink()
    assert asyncio.run(deliver(DownloadPlan(), sink)) == 0
    assert sink.artifacts == []
