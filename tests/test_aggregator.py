"""Tests for recursive subtree aggregation."""

import os

from storage_monitor.core import aggregator
from storage_monitor.core.aggregator import aggregate_directory, merge_extension_maps
from storage_monitor.core.models import ExtensionUsage

from .conftest import write_file


def test_aggregate_sums_every_file(sample_tree):
    size, count, extensions = aggregate_directory(str(sample_tree))

    assert size == 10 + 20 + 100 + 50 + 300
    assert count == 5
    assert extensions == {
        'unknown': ExtensionUsage(10, 1),
        'txt': ExtensionUsage(120, 2),
        'md': ExtensionUsage(50, 1),
        'gz': ExtensionUsage(300, 1),
    }


def test_extension_sizes_sum_to_total(sample_tree):
    size, _, extensions = aggregate_directory(str(sample_tree))

    assert sum(usage.size_bytes for usage in extensions.values()) == size


def test_empty_directory(tmp_path):
    assert aggregate_directory(str(tmp_path)) == (0, 0, {})


def test_symlinks_are_not_counted_or_followed(tmp_path):
    write_file(str(tmp_path / "real" / "data.bin"), 64)
    (tmp_path / "file-link.bin").symlink_to(tmp_path / "real" / "data.bin")
    (tmp_path / "dir-link").symlink_to(tmp_path / "real", target_is_directory=True)
    # A cycle back to the root must not recurse forever
    (tmp_path / "real" / "loop").symlink_to(tmp_path, target_is_directory=True)

    size, count, extensions = aggregate_directory(str(tmp_path))

    assert (size, count) == (64, 1)
    assert extensions == {'bin': ExtensionUsage(64, 1)}


def test_unreadable_subdirectory_contributes_zero(sample_tree, block_directory):
    block_directory(os.path.join(str(sample_tree), "docs"))

    size, count, extensions = aggregate_directory(str(sample_tree))

    assert (size, count) == (30, 2)
    assert set(extensions) == {'unknown', 'txt'}


def test_unreadable_root_yields_zero(tmp_path, block_directory):
    block_directory(str(tmp_path))

    assert aggregate_directory(str(tmp_path)) == (0, 0, {})


def test_deep_trees_switch_to_iterative_traversal(tmp_path, monkeypatch):
    current = tmp_path
    for level in range(12):
        current = current / f"level{level}"
        write_file(str(current / f"file{level}.dat"), level + 1)

    expected = aggregate_directory(str(tmp_path))

    monkeypatch.setattr(aggregator, "MAX_RECURSION_DEPTH", 3)
    assert aggregate_directory(str(tmp_path)) == expected
    assert expected[0] == sum(range(1, 13))
    assert expected[1] == 12


def test_aggregate_is_idempotent(sample_tree):
    assert aggregate_directory(str(sample_tree)) == aggregate_directory(str(sample_tree))


def test_merge_extension_maps_sums_key_union():
    target = {'txt': ExtensionUsage(10, 1), 'md': ExtensionUsage(5, 1)}
    source = {'txt': ExtensionUsage(7, 2), 'gz': ExtensionUsage(3, 1)}

    merge_extension_maps(target, source)

    assert target == {
        'txt': ExtensionUsage(17, 3),
        'md': ExtensionUsage(5, 1),
        'gz': ExtensionUsage(3, 1),
    }
    assert source['txt'] == ExtensionUsage(7, 2)
