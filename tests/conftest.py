import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

# Ensure project root is first on sys.path so local packages like `core` are used
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


class FakeExpander:
    """MacroExpander stand-in; unknown names expand to themselves like undefined identifiers"""

    def __init__(self, values: Optional[Dict[str, str]] = None, error: Optional[Exception] = None,
                 drop_last: bool = False) -> None:
        self.values = values or {}
        self.error = error
        self.drop_last = drop_last
        self.calls: List[tuple] = []

    def expand(self, header_path: Union[str, Path], names: Sequence[str]) -> List[str]:
        self.calls.append((str(header_path), list(names)))
        if self.error is not None:
            raise self.error
        segments = [self.values.get(n, n) for n in names]
        if self.drop_last:
            segments = segments[:-1]
        return segments


SAMPLE_HEADER = """\
#ifndef SAMPLE_IMGPROC_H
#define SAMPLE_IMGPROC_H

#define CV_BLUR_NO_SCALE 0
#define CV_GAUSSIAN\t2
#define CV_PI   3.1415926535897932384626433832795
#define CV_MAKETYPE(depth,cn) ((depth) + ((cn)-1) * 8)
#define CV_INLINE static inline

/* Smooths the image in one of several ways */
CVAPI(void) cvSmooth( const CvArr* src, CvArr* dst,
                      int smoothtype CV_DEFAULT(CV_GAUSSIAN),
                      int size1 CV_DEFAULT(3),
                      double sigma1 CV_DEFAULT(0) );

CVAPI(double) cvNorm( const CvArr* arr1, const CvArr* arr2 CV_DEFAULT(NULL),
                      int norm_type CV_DEFAULT(4), const CvArr* mask CV_DEFAULT(NULL) );

CVAPI(CvScalar) cvAvg( const CvArr* arr, const CvArr* mask CV_DEFAULT(NULL) );

CVAPI(void) cvCalcArrHist( CvArr** arr, CvHistogram* hist, int accumulate CV_DEFAULT(0) );

CVAPI(CvMat*) cvCreateMat( int rows, int cols, int type );

CVAPI(void) cvLine( CvArr* img, CvPoint pt1, CvPoint pt2, CvScalar color,
                    int thickness CV_DEFAULT(1) );

CVAPI(void) cvFindCornerSubPix( const CvArr* image, CvPoint2D32f* corners, int count, CvSize win );

CVAPI(int) otherFunction( int a );

CVAPI(void) cvHistCounts( const CvArr* src, CvArr* bin_counts, int nCount );

CVAPI(CvRect) cvBoundingRect( CvArr* points, int update CV_DEFAULT(0) );

CVAPI(void) cvResetState(void);

#endif
"""

SAMPLE_VALUES = {
    "CV_BLUR_NO_SCALE": "0",
    "CV_GAUSSIAN": "2",
    "CV_PI": "3.1415926535897932384626433832795",
    "CV_INLINE": "static inline",
}


@pytest.fixture
def make_expander() -> Callable[..., FakeExpander]:
    def _make_expander(values: Optional[Dict[str, str]] = None, **kwargs) -> FakeExpander:
        return FakeExpander(values, **kwargs)

    return _make_expander


@pytest.fixture
def sample_expander() -> FakeExpander:
    return FakeExpander(dict(SAMPLE_VALUES))


@pytest.fixture
def write_header(tmp_path: Path) -> Callable[[str, str], Path]:
    def _write_header(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write_header


@pytest.fixture
def sample_header(write_header: Callable[[str, str], Path]) -> Path:
    return write_header("sample_imgproc.h", SAMPLE_HEADER)


@pytest.fixture
def sample_values() -> Dict[str, str]:
    return dict(SAMPLE_VALUES)
