"""
Image Generation Agent: illustrates each scene via Gemini image output.

Every scene prompt becomes one generateContent request carrying all of the
brief's reference images followed by the prompt text. Requests run in
parallel; a failed scene comes back as None without affecting its siblings.
"""

from concurrent.futures import ThreadPoolExecutor, wait

import requests

from storyboard.errors import TimeoutFault, UpstreamCallFault
from storyboard.prompts import parse_data_url
from storyboard.settings import get_api_key


def generate_image(prompt, reference_images, config, api_key):
    """
    Generate one illustration.

    Returns a "data:<mime>;base64,<data>" string. Raises UpstreamCallFault on
    HTTP errors or when the response carries no image.
    """
    image_config = config.get("images", {})
    model = image_config.get("model", "gemini-2.5-flash-image")
    api_url = image_config.get("api_url", "https://generativelanguage.googleapis.com/v1beta")

    parts = []
    for ref in reference_images or []:
        try:
            mime_type, data = parse_data_url(ref.get("base64"))
        except ValueError:
            print(f"  WARNING: Skipping reference image {ref.get('name', '?')!r}: invalid data URL")
            continue
        parts.append({"inline_data": {"mime_type": mime_type, "data": data}})
    parts.append({"text": prompt})

    try:
        response = requests.post(
            f"{api_url.rstrip('/')}/models/{model}:generateContent",
            headers={
                "x-goog-api-key": api_key,
                "Content-Type": "application/json",
            },
            json={
                "contents": [{"parts": parts}],
                "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
            },
            timeout=image_config.get("request_timeout", 90),
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        detail = ""
        if getattr(e, "response", None) is not None:
            detail = f" ({e.response.text[:200]})"
        raise UpstreamCallFault(f"Image request failed: {e}{detail}") from e
    except ValueError as e:
        raise UpstreamCallFault("Image response was not JSON") from e

    candidates = data.get("candidates") or []
    response_parts = (candidates[0].get("content") or {}).get("parts") if candidates else None
    if not response_parts:
        raise UpstreamCallFault("No response parts from Gemini")

    for part in response_parts:
        inline = part.get("inlineData") or part.get("inline_data")
        if inline and inline.get("data"):
            mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
            return f"data:{mime_type};base64,{inline['data']}"

    raise UpstreamCallFault("No image data returned from Gemini")


def generate_images(prompts, reference_images, config, timeout=None):
    """
    Generate one image per prompt, all in parallel.

    Waits for every request to finish. The result list lines up with
    prompts; failed positions are None. A missing Gemini key fails the whole
    call, as does running past timeout.
    """
    if not prompts:
        return []

    api_key = get_api_key(config, "gemini_key")

    executor = ThreadPoolExecutor(max_workers=len(prompts))
    try:
        futures = [
            executor.submit(generate_image, prompt, reference_images, config, api_key)
            for prompt in prompts
        ]
        done, not_done = wait(futures, timeout=timeout)
        if not_done:
            for future in not_done:
                future.cancel()
            raise TimeoutFault("Image generation timed out")
    finally:
        executor.shutdown(wait=False)

    images = []
    for index, future in enumerate(futures):
        try:
            images.append(future.result())
        except Exception as e:
            print(f"  WARNING: Image generation failed for scene {index + 1}: {e}")
            images.append(None)

    succeeded = sum(1 for image in images if image)
    print(f"  Images generated: {succeeded}/{len(prompts)}")
    return images
