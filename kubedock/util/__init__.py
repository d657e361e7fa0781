"""Identifiers, tar archives, output framing, text conversion and network helpers."""