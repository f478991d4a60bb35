from golfdb.common.text import cluster_key, has_digits, normalise_text


def test_normalise_text_folds_ampersand_and_punctuation():
    assert normalise_text("Royal & Ancient  G.C.") == "royal and ancient g c"


def test_normalise_text_is_total():
    assert normalise_text(None) == ""
    assert normalise_text("") == ""
    assert normalise_text(42) == "42"


def test_cluster_key_drops_generic_venue_words():
    assert cluster_key("The Belfry Golf Club") == "belfry"
    assert cluster_key("Belfry") == "belfry"
    assert cluster_key("Belfry Golf Course") == "belfry"


def test_cluster_key_only_drops_whole_words():
    assert cluster_key("Parkstone Golf Club") == "parkstone"
    assert cluster_key("Clubhouse Links") == "clubhouse"


def test_normalisation_is_idempotent():
    for raw in ("St. Andrews - Old Course", "Wentworth & Co", "  "):
        once = cluster_key(raw)
        assert cluster_key(once) == once
        assert normalise_text(normalise_text(raw)) == normalise_text(raw)


def test_has_digits():
    assert has_digits("par 72")
    assert has_digits(70)
    assert not has_digits("unknown")
    assert not has_digits(None)
