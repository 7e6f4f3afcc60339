# bard

A few small tools: a listener and a sender that exchange text over a simple
TCP chunk protocol, a lister of recently changed files, and helpers for
finding round dots in pictures.

## Install

    pip install .

To run the tests:

    pip install ".[test]"
    pytest

## The message protocol

Messages travel in fixed 32-byte chunks. A chunk shorter than 32 bytes is
padded with zero bytes. After every chunk the server answers with the two
bytes `ok`. When the server receives a chunk holding a zero byte, it prints
the message gathered so far and starts a new one. A sender always ends a
message with a padded chunk (empty if the message filled its last chunk
exactly), so every message is printed.

## Commands

### bard-aether

Listens for senders (by default on `0.0.0.0`, port 3333), serves each
connection on its own thread and prints every complete message. It runs
until interrupted.

    bard-aether [--host HOST] [--port PORT]

### bard-typed-voice

Connects to a listener (by default `localhost`, port 3333), sends each line
read from standard input as one message and prints `Success` after each.

    bard-typed-voice [--host HOST] [--port PORT]

### bard-file

Looks at the entries of the current working directory and, for each regular
file modified less than 24 hours ago, prints a line such as:

    Last modified: 42 seconds, is read only: false, size: 1024 bytes, filename: "notes.txt"

A file counts as read only when none of its write permission bits are set.
Subdirectories are only descended into when they loop back on one of their
own ancestors, so in practice only the top level is listed.

### bard-hough

Finds circles of radius 4 to 14 pixels in a picture by voting for circle
centres along strong colour edges, then writes a copy of the picture with
each found circle filled in a saturated version of its blurred centre
colour, its hue snapped to a 30 degree step.

    bard-hough [IMAGE] [--output OUTPUT] [--verbose]

`IMAGE` defaults to `test_images/full_whiteboard_s4.png` and `--output` to
`out.bmp`; the output format follows the file extension. `--verbose` logs
vote and neighbourhood statistics for each radius.

## Library use

Send messages from your own code with `bard.voice.Voice`, which is a context
manager:

    from bard.voice import Voice

    with Voice("localhost", 3333) as voice:
        voice.speak("hello from the other side")

`Voice.send_chunk` sends one chunk of at most 32 bytes and returns `False`
when it is too large or the reply is not `ok`. `bard.voice.chunk_message`
splits a message into the chunks that go over the wire.
`bard.aether.handle_client` serves one connected socket and returns the
messages it printed; `bard.aether.serve` runs the listener.

`bard.file_bard` offers `format_entry(path, now=None)`, which returns the
line printed for a recent regular file or `None`, together with `walk_dir`,
`print_entry` and `contains_loop`.

The image helpers:

- `bard.hough`: `convolute` (a separable filter over a flat float image),
  `find_edges`, `hough_vote`, `write_vote`, `detect_circles`, `laplacian`,
  and the `Edge` and `Circle` records.
- `bard.walker`: `match_dots` walks outward in rings from every fifth pixel
  of a Pillow image, returns the `DotDescription`s it finds and marks each
  centre in magenta on an output image; `match_ring`, `get_protected`,
  `put_protected` and `convert_rgba` are the building blocks.
- `bard.imaging`: a fixed-size `Image` grid with `get_pixel` and
  `set_pixel` (reading a pixel that was never set raises `IndexError`), and
  the `RGB` and `HSV` colour records with `to_hsv` and `to_rgb`.

## What it does not do

There is no live viewer: pictures are read from and written to files only,
with no window, camera input or GPU processing. The ring-walking dot finder
in `bard.walker` has no command of its own and is used from Python only.