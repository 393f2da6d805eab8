import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from solarview.io.obj_loader import GeometryModel, ObjLoader, assign_display_colors

OBJ = """
# two parts
o PanelA
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
f 1 2 3
f 1 3 4
o PanelB
v 0 0 1
v 2 0 1
v 2 2 1
v 0 2 1
f 5/1/1 6/2/1 7/3/1 8/4/1
"""


@pytest.fixture
def model(reporter):
    return ObjLoader.parse(OBJ.splitlines(), model_scale=0.5, reporter=reporter, name="test")


def test_parts_and_offsets(model, reporter):
    assert model.part_names == ["PanelA", "PanelB"]
    assert reporter.error_count == 0

    a, b = model.parts
    assert_array_equal(a.faces, [[0, 1, 2], [0, 2, 3]])
    # global indices 5-8 map to part-local 0-3
    assert_array_equal(b.faces, [[0, 1, 2]])


def test_model_scale_applied(model):
    assert_allclose(model.parts[1].vertices[2], [1.0, 1.0, 0.5])


def test_ngon_truncated_to_first_triangle(model):
    # quad 5 6 7 8 keeps only 5 6 7: half of the 1x1 (scaled) square
    assert model.parts[1].num_triangles == 1
    assert_allclose(model.surface_areas(), [0.25, 0.5])


def test_bad_faces_reported_parsing_continues(reporter):
    lines = [
        "o P",
        "v 0 0 0",
        "v 1 0 0",
        "v 0 1 0",
        "v 0 0",
        "f 1 2",
        "f 1 2 9",
        "f 1 x 3",
        "f 1 2 3",
    ]
    model = ObjLoader.parse(lines, reporter=reporter)

    assert reporter.error_count == 4
    assert model.parts[0].num_triangles == 1
    assert len(model.parts[0].vertices) == 3


def test_geometry_before_object_line_goes_to_default_part(reporter):
    model = ObjLoader.parse(["v 0 0 0", "v 1 0 0", "v 0 1 0", "f 1 2 3"], reporter=reporter)
    assert model.part_names == ["default"]
    assert model.num_triangles == 1


def test_missing_file_gives_empty_model(tmp_path, reporter):
    model = ObjLoader.load_file(tmp_path / "missing.obj", reporter=reporter)
    assert model.is_empty()
    assert reporter.error_count == 1


def test_load_file(tmp_path, reporter):
    path = tmp_path / "sat.obj"
    path.write_text(OBJ)
    model = ObjLoader.load_file(path, reporter=reporter)
    assert model.name == "sat"
    assert model.num_parts == 2


def test_render_buffers_rebuilt_only_when_dirty(model):
    buffers = model.rebuild_buffers()
    assert model.rebuild_count == 1
    assert not model.is_dirty
    assert [b.vertex_count for b in buffers] == [6, 3]
    assert buffers[0].normals.shape == (6, 3)
    assert buffers[0].colors.shape == (6, 4)

    assert model.rebuild_buffers() is buffers
    assert model.rebuild_count == 1

    model.set_part_color(0, model.parts[0].color)
    assert not model.is_dirty

    model.set_part_color(0, (1.0, 0.0, 0.0, 1.0))
    assert model.is_dirty
    model.rebuild_buffers()
    assert model.rebuild_count == 2
    assert_allclose(model.render_buffers[0].colors[0], [1.0, 0.0, 0.0, 1.0])


def test_face_part_indices_match_trimesh_faces(model):
    mesh = model.to_trimesh()
    assert len(mesh.faces) == 3
    assert_array_equal(model.face_part_indices(), [0, 0, 1])


def test_empty_model():
    model = GeometryModel()
    assert model.to_trimesh() is None
    assert model.rebuild_buffers() == []
    assert len(model.face_part_indices()) == 0


def test_display_palettes():
    gray = assign_display_colors(3, use_grayscale=True)
    assert gray == [(0.25, 0.25, 0.25, 1.0), (0.5, 0.5, 0.5, 1.0), (0.75, 0.75, 0.75, 1.0)]
    assert assign_display_colors(0) == []
    assert len(assign_display_colors(6, use_grayscale=False)) > 0
    assert np.all(np.array(assign_display_colors(4, use_grayscale=False))[:, :3] < 1.0)
