"""Tests for pdf_operations module."""

import pytest
from conftest import build_pdf, labels_of, rotations_of

from pdfworkbench.services.document import load_pdf
from pdfworkbench.services.pdf_operations import (
    TransformationResult,
    delete_pages,
    merge_documents,
    reorder_pages,
    rotate_pages,
    split_document,
    split_to_singles,
)
from pdfworkbench.utils.exceptions import InvalidInput, OperationPrecondition


class TestMerge:
    def test_order_and_page_count(self, make_doc):
        a = make_doc(2, name="a.pdf")
        b = make_doc(3, name="b.pdf")
        result = merge_documents([a, b])
        assert isinstance(result, TransformationResult)
        assert labels_of(result.data) == [1, 2, 1, 2, 3]
        assert result.pages_affected == 5
        assert result.suggested_name.startswith("merged_")
        assert result.suggested_name.endswith(".pdf")

    def test_reverse_order(self, make_doc):
        a = make_doc(1, name="a.pdf")
        b = make_doc(2, name="b.pdf")
        assert labels_of(merge_documents([b, a]).data) == [1, 2, 1]

    def test_single_document_refused(self, three_page_doc):
        with pytest.raises(OperationPrecondition):
            merge_documents([three_page_doc])

    def test_empty_refused(self):
        with pytest.raises(OperationPrecondition):
            merge_documents([])

    def test_inputs_unchanged(self, make_doc):
        a = make_doc(2)
        b = make_doc(2)
        before = (a.data, b.data)
        merge_documents([a, b])
        assert (a.data, b.data) == before


class TestSplit:
    def test_selected_pages(self, five_page_doc):
        result = split_document(five_page_doc, "2,4")
        assert labels_of(result.data) == [2, 4]
        assert result.suggested_name == "extracted_five.pdf"

    def test_range_is_ascending(self, five_page_doc):
        result = split_document(five_page_doc, "5-3")
        assert labels_of(result.data) == [3, 4, 5]

    def test_out_of_bounds_dropped(self, three_page_doc):
        result = split_document(three_page_doc, "2,9")
        assert labels_of(result.data) == [2]

    def test_empty_range_refused(self, three_page_doc):
        with pytest.raises(InvalidInput):
            split_document(three_page_doc, "7-9")

    def test_blank_range_refused(self, three_page_doc):
        with pytest.raises(InvalidInput):
            split_document(three_page_doc, "")

    def test_accepts_ordinal_list(self, five_page_doc):
        assert labels_of(split_document(five_page_doc, [4, 1]).data) == [1, 4]


class TestSplitToSingles:
    def test_one_document_per_page(self, three_page_doc):
        results = split_to_singles(three_page_doc)
        assert [r.suggested_name for r in results] == [
            "sample_page_1.pdf",
            "sample_page_2.pdf",
            "sample_page_3.pdf",
        ]
        assert [labels_of(r.data) for r in results] == [[1], [2], [3]]

    def test_merge_reconstructs(self, five_page_doc):
        singles = [load_pdf(r.data, r.suggested_name) for r in split_to_singles(five_page_doc)]
        assert labels_of(merge_documents(singles).data) == [1, 2, 3, 4, 5]


class TestReorder:
    def test_permutation(self, make_doc):
        doc = make_doc(4)
        result = reorder_pages(doc, [1, 2, 0, 3])
        assert labels_of(result.data) == [2, 3, 1, 4]
        assert result.suggested_name == "reordered_sample.pdf"

    def test_inverse_restores(self, five_page_doc):
        perm = [3, 0, 4, 1, 2]
        inverse = [perm.index(i) for i in range(len(perm))]
        once = load_pdf(reorder_pages(five_page_doc, perm).data, "once.pdf")
        twice = reorder_pages(once, inverse)
        assert labels_of(twice.data) == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize("arrangement", [[0, 1], [0, 0, 1], [0, 1, 3], [0, 1, 2, 2]])
    def test_non_permutation_refused(self, three_page_doc, arrangement):
        with pytest.raises(InvalidInput):
            reorder_pages(three_page_doc, arrangement)


class TestDeletePages:
    def test_keeps_complement(self, five_page_doc):
        result = delete_pages(five_page_doc, {1, 3})
        assert labels_of(result.data) == [1, 3, 5]
        assert result.pages_affected == 2
        assert result.suggested_name == "trimmed_five.pdf"

    def test_all_but_one(self, five_page_doc):
        result = delete_pages(five_page_doc, [0, 1, 2, 3])
        assert labels_of(result.data) == [5]

    def test_all_pages_refused(self, three_page_doc):
        with pytest.raises(OperationPrecondition):
            delete_pages(three_page_doc, [0, 1, 2])

    def test_empty_selection_refused(self, three_page_doc):
        with pytest.raises(OperationPrecondition):
            delete_pages(three_page_doc, [])

    def test_out_of_range_ignored(self, three_page_doc):
        result = delete_pages(three_page_doc, [1, 7, -1])
        assert labels_of(result.data) == [1, 3]

    def test_only_out_of_range_refused(self, three_page_doc):
        with pytest.raises(OperationPrecondition):
            delete_pages(three_page_doc, [5])


class TestRotate:
    def test_all_pages(self, three_page_doc):
        result = rotate_pages(three_page_doc, 90)
        assert rotations_of(result.data) == [90, 90, 90]
        assert result.suggested_name == "rotated_sample.pdf"

    def test_targets_only(self, three_page_doc):
        result = rotate_pages(three_page_doc, 180, targets=[1])
        assert rotations_of(result.data) == [0, 180, 0]
        assert result.pages_affected == 1

    def test_negative_angle(self, three_page_doc):
        assert rotations_of(rotate_pages(three_page_doc, -90).data) == [270, 270, 270]

    def test_four_quarter_turns_restore(self, three_page_doc):
        doc = three_page_doc
        for _ in range(4):
            doc = load_pdf(rotate_pages(doc, 90, targets=[0]).data, doc.name)
        assert rotations_of(doc.data) == [0, 0, 0]

    def test_inherited_rotation_is_cumulative(self):
        doc = load_pdf(build_pdf(2, inherited_rotate=90), "inherited.pdf")
        assert rotations_of(rotate_pages(doc, 90, targets=[0]).data) == [180, 90]

    def test_non_quarter_turn_refused(self, three_page_doc):
        with pytest.raises(InvalidInput):
            rotate_pages(three_page_doc, 45)

    def test_source_unchanged(self, three_page_doc):
        before = three_page_doc.data
        rotate_pages(three_page_doc, 90)
        assert three_page_doc.data == before
        assert rotations_of(three_page_doc.data) == [0, 0, 0]
