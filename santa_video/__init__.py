"""Santa Video Generator: image-to-video client for Sora-style APIs.

Submits a still image plus a prompt, polls the remote job until it settles,
then downloads the finished video next to the caller.
"""

__version__ = "0.1.0"
