#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Combine JPEG and PNG photos into a single PDF.
"""

import photo_pdf_converter.cli


if __name__ == "__main__":
	photo_pdf_converter.cli.main()
