import cli


def test_new_list_summary_queue(tmp_path, capsys):
    base = ["--save-dir", str(tmp_path)]
    rc = cli.main(base + ["new", "--width", "12", "--height", "12", "--tile-size", "32",
                          "--village", "Aldwick:5,5", "--name", "start"])
    assert rc == 0
    assert (tmp_path / "start.save").is_file()

    assert cli.main(base + ["list"]) == 0
    out = capsys.readouterr().out
    assert "start.save" in out
    assert "Villages: 1" in out

    assert cli.main(base + ["summary", str(tmp_path / "start.save")]) == 0
    assert "Aldwick" in capsys.readouterr().out

    rc = cli.main(base + ["queue", str(tmp_path / "start.save"), "--settlement", "1",
                          "--type", "house", "--count", "2", "--save", "after"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Dispatched 2 work item(s) for Aldwick" in out
    assert (tmp_path / "after.save").is_file()


def test_summary_of_missing_save_fails(tmp_path, capsys):
    rc = cli.main(["--save-dir", str(tmp_path), "summary", str(tmp_path / "gone.save")])
    assert rc == 1
    assert "Save file not found" in capsys.readouterr().out


def test_list_empty_directory(tmp_path, capsys):
    assert cli.main(["--save-dir", str(tmp_path / "none"), "list"]) == 0
    assert "No saves" in capsys.readouterr().out
