# Sphinx configuration file

import os
import sys
sys.path.insert(0, os.path.abspath('../src'))

from deferred_flow import __version__  # noqa: E402

project = 'Deferred Flow'
copyright = '2024, Deferred Flow contributors'
author = 'Deferred Flow contributors'
release = __version__
version = '.'.join(__version__.split('.')[:2])

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.autosummary',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx_autodoc_typehints',
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']

# The composition primitives are the public surface; document them in source order.
autosummary_generate = True
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'show-inheritance': True,
    'exclude-members': '__weakref__, __del__, model_config',
}
typehints_defaults = 'comma'
always_document_param_types = False

# Docstrings use Google style only.
napoleon_google_docstring = True
napoleon_numpy_docstring = False

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'pydantic': ('https://docs.pydantic.dev/latest', None),
}
