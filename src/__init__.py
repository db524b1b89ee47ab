"""Fantasy Team Screenshot Extractor.

Recognises the text of a fantasy-cricket team screenshot with a hosted
multi-engine OCR service and recovers the eleven player names, the
captain and the vice-captain with layered text heuristics.
"""
