# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys
sys.path.insert(0,os.path.abspath('../src'))

# -- Project information -----------------------------------------------------

project = 'primordia'
copyright = '2026, the primordia developers'
author = 'the primordia developers'
release = '0.1.0'

# -- General configuration ---------------------------------------------------
extensions = ['sphinx.ext.autodoc','sphinx.ext.mathjax']

source_suffix = '.rst'

# The master toctree document.
master_doc = 'index'

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

autodoc_member_order = 'bysource'
#mpi4py and matplotlib are not needed to build the pages
autodoc_mock_imports = ['mpi4py','matplotlib']

# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']
