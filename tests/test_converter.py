from __future__ import annotations

import io
import tempfile
from datetime import date

import pytest

from converter import STAGE_QUEUE_SIZE, Tex2BibConverter, convert
from errors import BibEmptyError, BibUnclosedError
from models import ConverterConfig

BIB = """
\\begin{thebibliography}
\t\\bibitem{wcf}
\tRoss Anderson, Why Cryptosystems Fail, 1909, \\url{example.com/ra/wcf.pdf}

\t\\bibitem{wcdf}
\tRoss Anderson, Why Cryptosystems Don't Fail

\t\\bibitem{aass}
\tAsking Alexandria, Someone Somewhere, 2011

\\end{thebibliography}
"""

EXPECTED_BIB = """@online{wcf,
\tauthor = "Ross Anderson",
\ttitle = {{Why Cryptosystems Fail}},
\tyear = "1909",
\turl = {example.com/ra/wcf.pdf},
}

@online{wcdf,
\tauthor = "Ross Anderson",
\ttitle = {{Why Cryptosystems Don't Fail}},
\tyear = "2010",
}

@online{aass,
\tauthor = "Asking Alexandria",
\ttitle = {{Someone Somewhere}},
\tyear = "2011",
}

"""

EXPECTED_BIB_WITH_VISITED = """@online{wcf,
\tauthor = "Ross Anderson",
\ttitle = {{Why Cryptosystems Fail}},
\tyear = "1909",
\turl = {example.com/ra/wcf.pdf},
\turldate = "2018-7-6",
}

@online{wcdf,
\tauthor = "Ross Anderson",
\ttitle = {{Why Cryptosystems Don't Fail}},
\tyear = "2010",
\turldate = "2018-7-6",
}

@online{aass,
\tauthor = "Asking Alexandria",
\ttitle = {{Someone Somewhere}},
\tyear = "2011",
\turldate = "2018-7-6",
}

"""

TWO_ENTRY_BIB = """
\\begin{thebibliography}
\t\\bibitem{wcf}
\tRoss Anderson, Why Cryptosystems Fail

\t\\bibitem{wcdf}
\tRoss Anderson, Why Cryptosystems Don't Fail
\\end{thebibliography}
"""


def _run(text: str, **kwargs) -> tuple[int, str]:
    out = io.StringIO()
    config = ConverterConfig(input=io.StringIO(text), output=out, **kwargs)
    written = convert(config)
    return written, out.getvalue()


def test_convert_complete_with_default_year() -> None:
    written, result = _run(BIB, default_year=2010)

    assert written == 3
    assert result == EXPECTED_BIB


def test_convert_complete_with_default_visited() -> None:
    written, result = _run(BIB, default_year=2010, default_visited=date(2018, 7, 6))

    assert written == 3
    assert result == EXPECTED_BIB_WITH_VISITED


def test_convert_two_entries_in_order_with_default_year() -> None:
    _, result = _run(TWO_ENTRY_BIB, default_year=2010)

    blocks = result.split("\n\n")
    assert blocks[-1] == ""
    assert [b.splitlines()[0] for b in blocks[:-1]] == ["@online{wcf,", "@online{wcdf,"]
    assert all('\tyear = "2010",' in b for b in blocks[:-1])


def test_convert_without_default_year_omits_year() -> None:
    _, result = _run(TWO_ENTRY_BIB)

    assert "year" not in result


def test_convert_many_entries_keeps_order_through_bounded_queues() -> None:
    count = STAGE_QUEUE_SIZE * 5
    items = "".join(f"\\bibitem{{k{i}}}\nAuthor {i}, Title {i}\n" for i in range(count))
    text = f"\\begin{{thebibliography}}\n{items}\\end{{thebibliography}}\n"

    written, result = _run(text)

    assert written == count
    keys = [line[len("@online{"):-1] for line in result.splitlines() if line.startswith("@online{")]
    assert keys == [f"k{i}" for i in range(count)]


def test_convert_empty_input_raises_bib_empty() -> None:
    with pytest.raises(BibEmptyError):
        _run("")


def test_convert_unclosed_input_raises_bib_unclosed() -> None:
    with pytest.raises(BibUnclosedError):
        _run("\\bibitem{a}\nRoss Anderson, Why Cryptosystems Fail\n")


def test_convert_binary_streams() -> None:
    out = io.BytesIO()
    config = ConverterConfig(input=io.BytesIO(BIB.encode("utf-8")), output=out, default_year=2010)

    convert(config)

    assert out.getvalue().decode("utf-8") == EXPECTED_BIB


class _FailingWriter(io.StringIO):
    def write(self, s: str) -> int:
        raise OSError("write failed")


def test_convert_reports_write_errors() -> None:
    config = ConverterConfig(input=io.StringIO(BIB), output=_FailingWriter())

    with pytest.raises(OSError, match="write failed"):
        convert(config)


def test_converter_cannot_start_twice() -> None:
    converter = Tex2BibConverter(ConverterConfig(input=io.StringIO(BIB), output=io.StringIO()))
    converter.convert()

    with pytest.raises(RuntimeError, match="already started"):
        converter.convert()

    assert converter.wait() == 3


def test_converter_counts_written_entries() -> None:
    converter = Tex2BibConverter(ConverterConfig(input=io.StringIO(BIB), output=io.StringIO()))

    converter.convert()
    converter.wait()

    assert converter.entries_written == 3


def test_convert_into_text_mode_temporary_file() -> None:
    config_input = io.StringIO(BIB)
    with tempfile.NamedTemporaryFile("w+", encoding="utf-8") as out:
        written = convert(ConverterConfig(input=config_input, output=out, default_year=2010))
        out.seek(0)
        result = out.read()

    assert written == 3
    assert result == EXPECTED_BIB
