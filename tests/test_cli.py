"""
Tests for the icon-toolkit command line.

Each test writes a document JSON file, runs main() and inspects the
printed responses and the files it leaves behind.
"""

import json

import pytest

from icon_toolkit.cli import build_config, build_parser, main
from icon_toolkit.core.utils.serialization import load_document, save_document


@pytest.fixture
def mixed_path(tmp_path, mixed_document):
    path = tmp_path / "design.json"
    save_document(mixed_document, path)
    return path


@pytest.fixture
def duplicates_path(tmp_path, duplicate_icons_document):
    path = tmp_path / "duplicates.json"
    save_document(duplicate_icons_document, path)
    return path


def printed(capsys):
    return json.loads(capsys.readouterr().out)


class TestMain:
    """Tests for main()."""

    def test_scan_when_document_then_scan_complete(self, mixed_path, capsys):
        code = main([str(mixed_path), "scan"])

        responses = printed(capsys)
        assert code == 0
        assert responses[-1]["type"] == "scan-complete"
        assert responses[-1]["data"]["totalIcons"] == 3

    def test_scan_when_run_then_document_unchanged(self, mixed_path):
        before = mixed_path.read_text(encoding="utf-8")

        main([str(mixed_path), "scan"])

        assert mixed_path.read_text(encoding="utf-8") == before

    def test_consolidate_when_output_given_then_changed_document_written(
        self, duplicates_path, tmp_path, capsys
    ):
        output = tmp_path / "out" / "consolidated.json"

        code = main([str(duplicates_path), "consolidate", "-o", str(output)])

        assert code == 0
        assert printed(capsys)[-1]["data"]["iconsReplaced"] == 3
        document = load_document(output)
        assert document.find_page("🎯 Icon Library") is not None
        assert load_document(duplicates_path).find_page("🎯 Icon Library") is None

    def test_convert_when_master_then_exit_one(self, mixed_path, capsys):
        code = main([str(mixed_path), "convert", "1:10"])

        assert code == 1
        assert printed(capsys)[-1]["type"] == "convert-single-icon-error"

    def test_rename_when_icon_then_saved_in_place(self, mixed_path, capsys):
        code = main([str(mixed_path), "rename", "1:30"])

        assert code == 0
        assert load_document(mixed_path).get_node("1:30").name == "Star"

    def test_previews_when_dir_given_then_png_written(self, mixed_path, tmp_path, capsys):
        preview_dir = tmp_path / "previews"

        code = main([str(mixed_path), "previews", "1:30", "--preview-dir", str(preview_dir)])

        assert code == 0
        assert (preview_dir / "1_30.png").read_bytes().startswith(b"\x89PNG")

    def test_mark_when_markings_file_then_persisted(self, mixed_path, tmp_path, capsys):
        markings = tmp_path / "markings.json"

        code = main([str(mixed_path), "--markings", str(markings), "mark", "1:30", "swap"])

        assert code == 0
        data = json.loads(markings.read_text(encoding="utf-8"))
        assert data["markings"]["1:30"]["isMarkedForSwap"] is True

    def test_ignore_when_markings_file_then_next_scan_hides_icon(self, mixed_path, tmp_path, capsys):
        markings = tmp_path / "markings.json"
        main([str(mixed_path), "--markings", str(markings), "ignore", "1:30"])
        capsys.readouterr()

        main([str(mixed_path), "--markings", str(markings), "scan"])

        assert printed(capsys)[-1]["data"]["ignoredCount"] == 1

    def test_swap_when_icon_and_master_then_saved(self, mixed_path, capsys):
        code = main([str(mixed_path), "swap", "1:30", "1:10", "--keep-size"])

        assert code == 0
        assert printed(capsys)[-1]["type"] == "icon-swap-complete"
        document = load_document(mixed_path)
        assert not document.exists("1:30")
        assert document.find_page("🗄️ Archived Icons") is not None

    def test_add_icon_when_node_file_then_master_added(self, mixed_path, tmp_path, capsys):
        icon_file = tmp_path / "arrow-left.json"
        icon_file.write_text(json.dumps({
            "type": "VECTOR",
            "absoluteBoundingBox": {"width": 24, "height": 24},
        }), encoding="utf-8")

        code = main([str(mixed_path), "add-icon", str(icon_file), "--size", "24", "24"])

        assert code == 0
        assert printed(capsys)[-1]["data"]["componentName"] == "Icon/arrow-left"
        library = load_document(mixed_path).find_page("🎯 Icon Library")
        assert library is not None

    def test_add_icon_when_node_file_missing_then_exit_two(self, mixed_path, tmp_path):
        assert main([str(mixed_path), "add-icon", str(tmp_path / "absent.json")]) == 2

    def test_main_when_file_missing_then_exit_two(self, tmp_path):
        assert main([str(tmp_path / "absent.json"), "scan"]) == 2

    def test_main_when_invalid_json_then_exit_two(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        assert main([str(path), "scan"]) == 2


class TestBuildConfig:
    """Tests for flag overrides."""

    def test_config_when_flags_then_thresholds_overridden(self, tmp_path):
        args = build_parser().parse_args([
            "doc.json", "--similarity-threshold", "80", "--max-pages", "5",
            "--library-page", "Icons", "--timing", str(tmp_path / "t.json"), "scan",
        ])

        config = build_config(args)

        assert config.clustering.similarity_threshold == 80
        assert config.limits.max_pages == 5
        assert config.layout.page_name == "Icons"
        assert config.timing_path == tmp_path / "t.json"

    def test_config_when_threshold_out_of_range_then_exit_two(self, mixed_path):
        assert main([str(mixed_path), "--similarity-threshold", "150", "scan"]) == 2
