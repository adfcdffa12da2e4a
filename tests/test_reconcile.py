from backend.core.reconcile import MarkerLayer, reconcile


def test_reconcile_adds_removes_and_updates_by_key():
    diff = reconcile({"a": 1, "b": 2, "c": 3}, {"b": 2, "c": 30, "d": 4})
    assert diff.added == {"d": 4}
    assert diff.removed == ["a"]
    assert diff.updated == {"c": 30}


def test_unchanged_set_gives_empty_diff():
    diff = reconcile({"a": 1}, {"a": 1})
    assert diff.is_empty


def test_marker_layer_tracks_rendered_set():
    layer = MarkerLayer("flights")
    first = layer.apply({"F1": "x", "F2": "y"})
    assert set(first.added) == {"F1", "F2"}
    assert "F1" in layer
    assert len(layer) == 2

    second = layer.apply({"F2": "y2"})
    assert second.removed == ["F1"]
    assert second.updated == {"F2": "y2"}
    assert layer.markers == {"F2": "y2"}

    cleared = layer.clear()
    assert cleared.removed == ["F2"]
    assert len(layer) == 0
