"""Tests for the overlapping text splitter."""
import pytest

from indexing.chunk import TextChunker
from indexing.errors import ConfigurationError
from indexing.models import Document


def reassemble(chunks, overlap):
    if not chunks:
        return ''
    return chunks[0] + ''.join(c[overlap:] for c in chunks[1:])


def test_empty_text_gives_no_chunks() -> None:
    assert list(TextChunker().split_text('')) == []


def test_short_text_is_a_single_chunk() -> None:
    assert list(TextChunker().split_text('function f(){}')) == [
        'function f(){}'
    ]


def test_text_of_exactly_chunk_size_is_one_chunk() -> None:
    text = 'x' * 1000
    assert list(TextChunker(1000, 200).split_text(text)) == [text]


def test_one_character_over_gives_two_chunks() -> None:
    text = 'x' * 1001
    chunks = list(TextChunker(1000, 200).split_text(text))
    assert chunks == ['x' * 1000, 'x' * 201]


@pytest.mark.parametrize('chunk_size,overlap', [
    (100, 100),
    (100, 150),
    (0, 0),
    (100, -1),
])
def test_invalid_sizes_are_rejected(chunk_size, overlap) -> None:
    with pytest.raises(ConfigurationError):
        TextChunker(chunk_size, overlap)


def test_chunks_are_bounded_and_overlap_exactly() -> None:
    text = '\n'.join(f'line {i}: ' + 'word ' * (i % 17) for i in range(400))
    chunks = list(TextChunker(1000, 200).split_text(text))

    assert len(chunks) > 1
    assert all(len(c) <= 1000 for c in chunks)
    for previous, current in zip(chunks, chunks[1:]):
        assert previous[-200:] == current[:200]


def test_dropping_overlaps_reconstructs_the_text() -> None:
    text = ''.join(
        f'def f{i}(x):\n    return x * {i}\n\n' for i in range(300)
    )
    chunks = list(TextChunker(1000, 200).split_text(text))

    assert reassemble(chunks, 200) == text


def test_hard_cut_without_break_points() -> None:
    text = 'a' * 2500
    chunks = list(TextChunker(1000, 200).split_text(text))

    assert [len(c) for c in chunks] == [1000, 1000, 900]
    assert reassemble(chunks, 200) == text


def test_prefers_paragraph_breaks_over_later_lines() -> None:
    text = 'a' * 500 + '\n\n' + 'b' * 300 + '\n' + 'c' * 600
    chunks = list(TextChunker(1000, 200).split_text(text))

    assert chunks[0] == 'a' * 500 + '\n\n'
    assert reassemble(chunks, 200) == text


def test_line_break_beats_hard_cut() -> None:
    text = 'a' * 700 + '\n' + 'b' * 700
    chunks = list(TextChunker(1000, 200).split_text(text))

    assert chunks[0] == 'a' * 700 + '\n'
    assert reassemble(chunks, 200) == text


def test_split_is_restartable() -> None:
    chunker = TextChunker(50, 10)
    text = 'lorem ipsum dolor sit amet ' * 20

    assert list(chunker.split_text(text)) == list(chunker.split_text(text))


def test_chunk_text_numbers_chunks_contiguously() -> None:
    document = Document('src/a.ts', 'z' * 3000)
    chunks = TextChunker(1000, 200).chunk_text(document)

    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert {c.total for c in chunks} == {len(chunks)}
    assert all(c.document is document for c in chunks)
