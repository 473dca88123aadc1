from .streams import (
    OrientationStream,
    generate_noisy_stream,
    load_stream,
    load_stream_csv,
    load_stream_h5,
    save_stream_csv,
    save_stream_h5,
)
