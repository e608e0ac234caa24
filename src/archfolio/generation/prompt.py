from __future__ import annotations

from archfolio.providers.base import LayoutRequest

LAYOUT_PROMPT = """You are an expert portfolio designer specializing in modern, minimalist architecture and interior design portfolios. Your goal is to create visually stunning and professional layouts based on the provided project details and images.

You will receive project details and a list of image URLs. You need to design a grid-based layout for these assets. The total number of images available is {image_count}.

Follow these rules:
1. Grid System: Define a grid system by specifying the number of columns (gridCols). Use between {cols_min} and {cols_max} columns.
2. Component Placement: For each image and text box, define its position on the grid using 'colSpan' and 'rowSpan'. No colSpan may exceed gridCols, and the total column span in a row should not exceed gridCols.
3. Image Mapping: When placing an image, use the 0-based 'imageIndex' to refer to an image from the provided list. Valid indices are 0 to {max_index}. Use all available images.
4. Text Boxes: Strategically place 2-3 text boxes to complement the images. These can be for project descriptions, details, or other annotations. The content should be placeholder 'lorem ipsum' text.
5. Variety: Create dynamic and interesting layouts. Avoid simple, monotonous grids. Mix large hero images with smaller accent images. Juxtapose images with text.
6. Description: Provide a brief 'layoutDescription' explaining your design choices.

Project Details:
{project_details}

Image URLs:
{image_list}

Generate a layout configuration that includes the grid column count and an array of components.
"""


def build_layout_prompt(request: LayoutRequest, grid_cols_range: tuple[int, int]) -> str:
    cols_min, cols_max = grid_cols_range
    image_list = "\n".join(f"[{i}] {url}" for i, url in enumerate(request.image_urls))
    return LAYOUT_PROMPT.format(
        image_count=len(request.image_urls),
        cols_min=cols_min,
        cols_max=cols_max,
        max_index=len(request.image_urls) - 1,
        project_details=request.project_details,
        image_list=image_list,
    )
