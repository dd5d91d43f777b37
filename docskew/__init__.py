"""Document skew detection and correction.

Estimates the in-plane rotation of photographed identity documents with
several independent image-processing estimators, fuses their answers and
rotates the photograph upright before it is handed to OCR.
"""
