"""
Gradio Web Interface for the Photo Mosaic Generator

This application provides an interactive web interface around the
photo_mosaic package: upload a JPEG photo, choose how many tiles span each
edge, and the photo is rebuilt from the tile images in the `images/`
directory.

Features:
    - Adjustable grid (tiles per edge)
    - Original and mosaic shown side by side
    - Grid, palette and timing information
    - The latest mosaic is also written to mosaic.jpg
"""

import io

import gradio as gr
from PIL import Image

from photo_mosaic import MosaicEngine, MosaicError
from photo_mosaic.config import (
    DEFAULT_DIVISIONS,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_TILES_DIR,
    MAX_DIVISIONS,
)
from photo_mosaic.utils import logger

engine = MosaicEngine(tile_directory=DEFAULT_TILES_DIR)


def generate_mosaic(image_path, tiles_count):
    """
    Create a mosaic for the uploaded file.

    Args:
        image_path: Path of the uploaded JPEG file
        tiles_count: Number of tiles along each edge

    Returns:
        Tuple of (mosaic_image, info_markdown)
    """
    if image_path is None:
        return None, "❗ Please upload a JPEG image."

    with open(image_path, "rb") as f:
        data = f.read()

    try:
        result = engine.create_mosaic(data, int(tiles_count), save_path=DEFAULT_OUTPUT_FILE)
    except MosaicError as e:
        logger.warning(f"Cannot show the mosaic: {e}")
        return None, f"❗ Error while generating mosaic: {e}"

    mosaic = Image.open(io.BytesIO(result.encoded))
    usage = result.tile_usage()

    info_md = (
        f"**Cells:** {result.cell_count} of {result.x_delta}×{result.y_delta} px  \n"
        f"**Palette:** {result.palette_size} tiles, {len(usage)} used "
        f"(most used: `{usage.index[0]}` ×{usage.iloc[0]})  \n"
        f"**Processing Time:** {result.elapsed:.3f}s"
    )
    return mosaic, info_md


with gr.Blocks(title="Photo Mosaic Generator") as demo:
    gr.Markdown(
        """
        # 🎨 Photo Mosaic Generator

        Upload a JPEG photo, choose how many tiles span each edge, and click **Run**.
        Each cell of the photo is replaced by the tile whose average color is closest.
        """
    )

    with gr.Row():
        with gr.Column(scale=1):
            input_image = gr.Image(label="Original", type="filepath")
            tiles_slider = gr.Slider(
                minimum=1,
                maximum=MAX_DIVISIONS,
                value=DEFAULT_DIVISIONS,
                step=1,
                label="Tiles per edge",
            )
            btn = gr.Button("🚀 Run", variant="primary")

        with gr.Column(scale=1):
            mosaic_out = gr.Image(label="Mosaic", type="pil")
            mosaic_info = gr.Markdown("")

    btn.click(
        fn=generate_mosaic,
        inputs=[input_image, tiles_slider],
        outputs=[mosaic_out, mosaic_info],
    )


if __name__ == "__main__":
    demo.launch()
