import pytest

from gedcom_changes.processing.parser import GedcomParser

GEDCOM = (
    "0 HEAD\r\n1 SOUR webtrees\r\n1 GEDC\r\n2 VERS 5.5.1\r\n"
    "0 @I1@ INDI\r\n1 NAME John /Smith/\r\n1 FAMS @F1@\r\n"
    "0 @F1@ FAM\r\n1 HUSB @I1@\r\n"
    "0 NOTE without xref\r\n"
    "0 @N1@ NOTE Born at sea\r\n"
    "0 TRLR\r\n"
)


def test_parse_splits_level_0_records(tmp_path):
    path = tmp_path / "family.ged"
    path.write_bytes(GEDCOM.encode("utf-8"))

    chunks = GedcomParser(str(path)).parse()

    assert [(c.xref, c.tag) for c in chunks] == [
        ("HEAD", "HEAD"),
        ("I1", "INDI"),
        ("F1", "FAM"),
        ("N1", "NOTE"),
    ]
    assert chunks[1].gedcom == "0 @I1@ INDI\n1 NAME John /Smith/\n1 FAMS @F1@"


def test_parse_skips_malformed_records(tmp_path, caplog):
    path = tmp_path / "broken.ged"
    path.write_text("0 @I1@ INDI\n1 NAME A\n0 @@ BROKEN\n1 NOTE x\n0 @I2@ INDI\n", encoding="utf-8")

    chunks = GedcomParser(str(path)).parse()

    assert [c.xref for c in chunks] == ["I1", "I2"]
    assert "Skipping malformed record" in caplog.text


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        GedcomParser("/nonexistent/family.ged")
