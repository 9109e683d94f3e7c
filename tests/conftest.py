"""Pytest configuration and fixtures."""

import json

import pytest

from pyy2ipynb.config import reset_config

# 1x1 PNG and 1x1 GIF
PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
GIF_B64 = "R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7"


@pytest.fixture(autouse=True)
def reset_config_after_test():
    """Reset global config after each test."""
    yield
    reset_config()


@pytest.fixture
def png_b64():
    """Base64 payload of a 1x1 PNG."""
    return PNG_B64


@pytest.fixture
def gif_b64():
    """Base64 payload of a 1x1 GIF."""
    return GIF_B64


@pytest.fixture
def sample_pyy_data():
    """Sample pyy document with the loose shapes authors produce."""
    return {
        "pyyFormat": 1,
        "nbformat": 4,
        "metadata": {
            "kernelspec": {
                "display_name": "Python 3",
                "language": "python",
                "name": "python3",
            }
        },
        "cells": [
            {
                "id": "intro",
                "cell_type": "markdown",
                "source": "# Lists\n\nA list holds values in order.\n",
                "metadata": {},
            },
            {
                "id": "make-list",
                "cell_type": "code",
                "codeCellIndex": 0,
                "source": "xs = [1, 2, 3]\nprint(xs)",
                "outputs": [
                    {"output_type": "stream", "name": "stdout", "text": "[1, 2, 3]\n"},
                ],
                "execution_count": None,
            },
            {
                "id": "show-len",
                "cell_type": "code",
                "codeCellIndex": 1,
                "source": "len(xs)",
                "outputs": [
                    {"output_type": "execute_result", "data": {"text/plain": "3"}},
                ],
            },
            {
                "id": "plot",
                "cell_type": "code",
                "codeCellIndex": 2,
                "source": "plot(xs)",
                "outputs": [
                    {
                        "output_type": "display_data",
                        "data": {"image/png": PNG_B64, "text/plain": "<Figure>"},
                        "metadata": {},
                    }
                ],
            },
        ],
    }


@pytest.fixture
def sample_pyy_file(tmp_path, sample_pyy_data):
    """Write the sample pyy document to a temporary file."""
    path = tmp_path / "lesson.pyy"
    path.write_text(json.dumps(sample_pyy_data), encoding="utf-8")
    return path
