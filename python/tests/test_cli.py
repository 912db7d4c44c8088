"""
CLI Tests - Verify the command-line entry point.
"""

import json

from fileperson.cli import main


class TestMain:
    """Tests for main()."""

    def test_summary(self, media_tree, test_config, capsys):
        code = main(["--root", str(test_config.root), "--ext", "mp3", "wav"])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("2 files (mp3, wav) in 1 directories")

    def test_json_output(self, media_tree, test_config, capsys):
        code = main(["--root", str(test_config.root), "--ext", "mp3", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["flat"]["entries"] == [{"File": str(media_tree["mp3"])}]
        assert data["infos"] == []

    def test_uses_config_defaults(self, media_tree, test_config, capsys):
        code = main([])

        assert code == 0
        assert capsys.readouterr().out.startswith("1 files (mp3)")

    def test_missing_root(self, temp_dir, test_config, capsys):
        code = main(["--root", str(temp_dir / "gone")])

        assert code == 1
        assert "error:" in capsys.readouterr().err
