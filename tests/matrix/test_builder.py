from wage_planner.matrix.builder import create_empty_matrix


def test_every_cell_has_zero_rates_for_every_grade():
    matrix = create_empty_matrix(["A", "B"], ["L1", "L2", "L3"], ["S", "A", "B"])

    cells = list(matrix.iter_cells())
    assert len(cells) == 6
    for cell in cells:
        assert set(cell.grade_rates) == {"S", "A", "B"}
        assert all(r.effective_rate() == 0.0 for r in cell.grade_rates.values())
        assert cell.pay_zone_overrides == {}
        assert cell.statistics.employee_count == 0
    assert matrix.metadata.version == 1


def test_duplicate_vocabulary_is_collapsed():
    matrix = create_empty_matrix(["A", "A", "B"], ["L1"], ["S", "S"])
    assert matrix.bands == ["A", "B"]
    assert matrix.grades == ["S"]
    assert matrix.cell("A", "L1") is matrix.cells[0][0]


def test_empty_vocabulary_gives_empty_grid():
    matrix = create_empty_matrix([], [], [])
    assert matrix.cells == []
    assert matrix.cell("A", "L1") is None
