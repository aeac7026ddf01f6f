from __future__ import annotations

import pytest

from solver import Contradiction, Grid, InvalidInput, from_string
from solver.grid import ALL_CANDIDATES, PEERS, UNITS, box_of, cell_index, check_validity, peers


PUZZLE = (
    "530070000"
    "600195000"
    "098000060"
    "800060003"
    "400803001"
    "700020006"
    "060000280"
    "000419005"
    "000080079"
)


def _grid() -> Grid:
    return Grid(from_string(PUZZLE))


def _expected_candidates(grid: Grid, index: int) -> tuple[int, ...]:
    taken = {grid.value(peer) for peer in PEERS[index]}
    return tuple(digit for digit in range(1, 10) if digit not in taken)


def test_topology_has_twenty_peers_per_cell() -> None:
    assert len(UNITS) == 27
    assert all(len(unit) == 9 for unit in UNITS)
    assert all(len(cell_peers) == 20 for cell_peers in PEERS)
    assert 0 not in PEERS[0]
    assert peers((4, 4)) == PEERS[40]


def test_box_index_and_cell_addressing() -> None:
    assert box_of(0, 0) == 0
    assert box_of(4, 7) == 5
    assert box_of(8, 8) == 8
    assert cell_index((2, 3)) == 21
    assert cell_index(80) == 80
    with pytest.raises(IndexError):
        cell_index((9, 0))
    with pytest.raises(TypeError):
        cell_index(True)


def test_construct_reads_row_major_values() -> None:
    grid = _grid()
    assert grid.value((0, 0)) == 5
    assert grid.value((0, 4)) == 7
    assert grid.value(80) == 9
    assert grid.is_given((0, 1))
    assert not grid.is_given((0, 2))
    assert grid.values() == [int(ch) for ch in PUZZLE]
    assert grid.givens() == grid.values()
    assert len(grid.empty_cells()) == PUZZLE.count("0")
    assert not grid.is_complete()


def test_blank_markers_are_accepted() -> None:
    values: list = [0] * 81
    values[0] = None
    values[1] = ""
    values[2] = 7
    grid = Grid(values)
    assert grid.value(0) == 0
    assert grid.value(1) == 0
    assert grid.value(2) == 7


def test_candidates_match_peer_values_after_construction() -> None:
    grid = _grid()
    for index in grid.empty_cells():
        assert grid.candidates(index) == _expected_candidates(grid, index)
    assert grid.candidates((0, 0)) == ()


@pytest.mark.parametrize("length", [0, 80, 82])
def test_construct_rejects_wrong_length(length: int) -> None:
    with pytest.raises(InvalidInput) as excinfo:
        Grid([0] * length)
    assert [issue.code for issue in excinfo.value.issues] == ["grid.length"]


def test_construct_rejects_out_of_range_and_wrong_types() -> None:
    values: list = [0] * 81
    values[3] = 10
    values[4] = -1
    values[5] = "7"
    values[6] = True
    with pytest.raises(InvalidInput) as excinfo:
        Grid(values)
    codes = [(issue.code, issue.path) for issue in excinfo.value.issues]
    assert codes == [
        ("cell.range", "$[3]"),
        ("cell.range", "$[4]"),
        ("cell.type", "$[5]"),
        ("cell.type", "$[6]"),
    ]


def test_construct_rejects_duplicate_givens_in_row() -> None:
    values = [0] * 81
    values[0] = 9
    values[8] = 9
    with pytest.raises(InvalidInput) as excinfo:
        Grid(values)
    issues = excinfo.value.issues
    assert len(issues) == 1
    assert issues[0].code == "given.conflict"
    assert issues[0].path == "rows[0]"


def test_construct_reports_column_and_box_conflicts() -> None:
    values = [0] * 81
    values[0] = 4
    values[10] = 4
    values[72] = 4
    with pytest.raises(InvalidInput) as excinfo:
        Grid(values)
    paths = sorted(issue.path for issue in excinfo.value.issues)
    assert paths == ["boxes[0]", "cols[0]"]


def test_check_validity_mirrors_construction() -> None:
    assert check_validity(from_string(PUZZLE))
    values = from_string(PUZZLE)
    values[2] = 5
    assert not check_validity(values)
    assert not check_validity([0] * 80)


def test_assign_removes_digit_from_peers() -> None:
    grid = _grid()
    before = {peer: grid.candidate_mask(peer) for peer in PEERS[2]}
    grid.assign((0, 2), 4)
    assert grid.value(2) == 4
    assert not grid.is_given(2)
    for peer, mask in before.items():
        if grid.value(peer):
            continue
        assert 4 not in grid.candidates(peer)
        assert grid.candidate_mask(peer) == mask & ~(1 << 3)
    for index in grid.empty_cells():
        assert grid.candidates(index) == _expected_candidates(grid, index)


def test_assign_reports_singleton_and_emptied_peers() -> None:
    values = [0] * 81
    # Row 0 holds 1-7; cells (0, 7) and (0, 8) are left with {8, 9}.
    for col, digit in enumerate(range(1, 8)):
        values[col] = digit
    grid = Grid(values)
    assert grid.candidates((0, 7)) == (8, 9)
    reduced = grid.assign((0, 7), 8)
    assert 8 in reduced
    assert grid.candidates((0, 8)) == (9,)

    grid = Grid(values)
    grid.eliminate((0, 8), 9)
    reduced = grid.assign((0, 7), 8)
    assert 8 in reduced
    assert grid.candidate_mask((0, 8)) == 0


def test_assign_rejects_illegal_values() -> None:
    grid = _grid()
    with pytest.raises(Contradiction):
        grid.assign((0, 2), 5)
    with pytest.raises(Contradiction):
        grid.assign((0, 0), 3)
    assert grid.assign((0, 0), 5) == []
    with pytest.raises(ValueError):
        grid.assign((0, 2), 0)


def test_undo_assign_restores_exact_state() -> None:
    grid = _grid()
    masks = [grid.candidate_mask(index) for index in range(81)]
    values = grid.values()
    grid.assign((0, 2), 4)
    grid.undo_assign((0, 2))
    assert grid.values() == values
    assert [grid.candidate_mask(index) for index in range(81)] == masks


def test_undo_assign_is_last_in_first_out() -> None:
    grid = _grid()
    grid.assign((0, 2), 4)
    grid.assign((0, 3), 6)
    with pytest.raises(ValueError):
        grid.undo_assign((0, 2))
    grid.undo_assign((0, 3))
    grid.undo_assign((0, 2))
    with pytest.raises(ValueError):
        grid.undo_assign((0, 0))


def test_eliminate_is_journaled() -> None:
    grid = _grid()
    index = grid.empty_cells()[0]
    digit = grid.candidates(index)[0]
    snapshot = grid.snapshot()
    assert grid.eliminate(index, digit) is True
    assert digit not in grid.candidates(index)
    assert grid.eliminate(index, digit) is False
    grid.restore(snapshot)
    assert digit in grid.candidates(index)


def test_eliminate_refuses_to_empty_a_cell() -> None:
    grid = _grid()
    with pytest.raises(Contradiction):
        grid.eliminate((0, 0), 5)
    assert grid.eliminate((0, 0), 4) is False
    values = [0] * 81
    for col, digit in enumerate(range(1, 9)):
        values[col] = digit
    grid = Grid(values)
    assert grid.candidates((0, 8)) == (9,)
    with pytest.raises(Contradiction):
        grid.eliminate((0, 8), 9)


def test_restore_unwinds_nested_mutations() -> None:
    grid = _grid()
    masks = [grid.candidate_mask(index) for index in range(81)]
    values = grid.values()
    outer = grid.snapshot()
    grid.assign((0, 2), 4)
    inner = grid.snapshot()
    grid.assign((0, 3), 6)
    grid.eliminate((0, 5), 8)
    grid.restore(inner)
    assert grid.value((0, 3)) == 0
    assert grid.value((0, 2)) == 4
    grid.restore(outer)
    assert grid.values() == values
    assert [grid.candidate_mask(index) for index in range(81)] == masks


def test_restore_rejects_stale_snapshot() -> None:
    grid = _grid()
    base = grid.snapshot()
    grid.assign((0, 2), 4)
    stale = grid.snapshot()
    grid.restore(base)
    with pytest.raises(ValueError):
        grid.restore(stale)
    grid.assign((0, 2), 2)
    with pytest.raises(ValueError):
        grid.restore(stale)
    grid.restore(base)
    assert grid.value((0, 2)) == 0


def test_version_grows_with_each_mutation() -> None:
    grid = _grid()
    assert grid.version == 0
    grid.assign((0, 2), 4)
    grid.eliminate((0, 3), 2)
    assert grid.version == 2
    grid.restore(grid.snapshot())
    assert grid.version == 2


def test_copy_is_independent() -> None:
    grid = _grid()
    clone = grid.copy()
    clone.assign((0, 2), 4)
    assert grid.value((0, 2)) == 0
    assert clone.value((0, 2)) == 4
    clone.undo_assign((0, 2))
    assert clone.values() == grid.values()


def test_empty_board_has_full_candidates() -> None:
    grid = Grid([0] * 81)
    assert all(grid.candidate_mask(index) == ALL_CANDIDATES for index in range(81))
    assert grid.is_valid()


def test_text_rendering() -> None:
    grid = _grid()
    lines = str(grid).splitlines()
    assert lines[0] == "+-------+-------+-------+"
    assert lines[1] == "| 5 3 . | . 7 . | . . . |"
    assert len(lines) == 13
    assert repr(grid) == f"Grid({PUZZLE!r})"
