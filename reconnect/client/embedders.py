import io
import logging
import open_clip
import torch
from PIL import Image

logger = logging.getLogger(__name__)


class ClipEmbedder:
    """Pretrained CLIP image encoder, installed with the `vision` extra."""

    def __init__(self, model_name: str = "ViT-B-32", pretrained: str = "openai", device=None):
        self.device = device or ("cuda" if torch.cuda.is_available() else "cpu")
        self.model, _, self.preprocess = open_clip.create_model_and_transforms(model_name, pretrained=pretrained)
        self.model = self.model.to(self.device)
        self.model.eval()

        logger.info("CLIP %s loaded on %s", model_name, self.device)

    def embed(self, image: bytes) -> list:
        img = Image.open(io.BytesIO(image)).convert("RGB")
        image_input = self.preprocess(img).unsqueeze(0).to(self.device)

        with torch.no_grad():
            embedding = self.model.encode_image(image_input)

        embedding = embedding / embedding.norm(dim=-1, keepdim=True)
        return embedding.cpu().numpy().flatten().tolist()
