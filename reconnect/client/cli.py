import sys
import json
import logging
import argparse

from reconnect.config import API_BASE_URL, LOG_LEVEL
from reconnect.client.api import ApiError, IncompleteFormError, ReConnectClient
from reconnect.client.form_state import CATEGORIES, FoundItemForm, apply_place, edit_field, set_coordinates, set_image
from reconnect.client.geocoding import GeocodingError, reverse_geocode
from reconnect.client.similarity import can_reveal_contact, compare_images
from reconnect.client.verification import SimulatedDocumentVerifier

logger = logging.getLogger(__name__)


def _read(path):
    with open(path, "rb") as fh:
        return fh.read()


def _print(data):
    print(json.dumps(data, indent=2, default=str))


def cmd_post(client, args):
    form = FoundItemForm()
    form = edit_field(form, "description", args.description)
    form = edit_field(form, "contact_no", args.contact)
    form = edit_field(form, "category", args.category)
    form = edit_field(form, "city", args.city or "")
    form = edit_field(form, "location_desc", args.location_desc or "")
    form = set_image(form, args.image)

    if args.lat is not None and args.lng is not None:
        form = set_coordinates(form, args.lat, args.lng)

        if args.locate:
            try:
                form = apply_place(form, reverse_geocode(args.lat, args.lng))
            except GeocodingError as e:
                print(e, file=sys.stderr)

    _print(client.submit(form))


def cmd_search(client, args):
    response = client.search(args.product, args.category, args.location)
    print(response["message"])
    _print(response["results"])


def cmd_contact(client, args):
    print(f"Finder Contact: {client.get_contact(args.item_id)}")


def cmd_locate(client, args):
    place = reverse_geocode(args.lat, args.lng)
    _print({"city": place.city, "display_name": place.display_name})


def cmd_verify_document(client, args):
    result = SimulatedDocumentVerifier().verify(_read(args.document))
    _print({"verified": result.verified, "fields": result.fields, "error": result.error})


def _match(client, args):
    # heavy import, only needed for image comparison
    from reconnect.client.embedders import ClipEmbedder

    return compare_images(ClipEmbedder(), _read(args.image), client.fetch_image(args.found_image))


def cmd_match(client, args):
    match = _match(client, args)
    _print({"score": match.score, "match_likelihood": match.likelihood, "comparison_notes": match.notes})


def cmd_claim(client, args):
    match = _match(client, args)
    verification = SimulatedDocumentVerifier().verify(_read(args.document))

    print(match.notes)
    if verification.error:
        print(verification.error)

    if not can_reveal_contact(match, verification):
        print("Contact stays hidden until the image match is High and the report is verified.")
        return 1

    print(f"Finder Contact: {client.get_contact(args.item_id)}")


def build_parser():
    parser = argparse.ArgumentParser(prog="reconnect", description="ReConnect lost and found client")
    parser.add_argument("--api", default=API_BASE_URL, help="API base URL")
    sub = parser.add_subparsers(dest="command", required=True)

    post = sub.add_parser("post", help="Report a found item")
    post.add_argument("--image", required=True)
    post.add_argument("--description", required=True)
    post.add_argument("--contact", required=True)
    post.add_argument("--category", required=True, choices=CATEGORIES)
    post.add_argument("--city")
    post.add_argument("--location-desc")
    post.add_argument("--lat", type=float)
    post.add_argument("--lng", type=float)
    post.add_argument("--locate", action="store_true", help="Fill city and spot from the coordinates")
    post.set_defaults(func=cmd_post)

    search = sub.add_parser("search", help="Search found items")
    search.add_argument("--product")
    search.add_argument("--category", choices=CATEGORIES)
    search.add_argument("--location")
    search.set_defaults(func=cmd_search)

    contact = sub.add_parser("contact", help="Show the finder's contact number")
    contact.add_argument("item_id", type=int)
    contact.set_defaults(func=cmd_contact)

    locate = sub.add_parser("locate", help="Reverse geocode coordinates")
    locate.add_argument("lat", type=float)
    locate.add_argument("lng", type=float)
    locate.set_defaults(func=cmd_locate)

    verify = sub.add_parser("verify-document", help="Run the simulated report check")
    verify.add_argument("document")
    verify.set_defaults(func=cmd_verify_document)

    for name, func, help_text in (
        ("match", cmd_match, "Compare your photo with a found item's image"),
        ("claim", cmd_claim, "Match, verify and reveal the finder contact"),
    ):
        p = sub.add_parser(name, help=help_text)
        if name == "claim":
            p.add_argument("item_id", type=int)
            p.add_argument("--document", required=True)
        p.add_argument("--image", required=True, help="Photo of your lost item")
        p.add_argument("--found-image", required=True, help="image_path from a search result")
        p.set_defaults(func=func)

    return parser


def main(argv=None):
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s - %(message)s")

    args = build_parser().parse_args(argv)
    client = ReConnectClient(args.api)

    try:
        return args.func(client, args) or 0
    except IncompleteFormError as e:
        print(f"{e} Missing: {', '.join(e.missing)}", file=sys.stderr)
    except (ApiError, GeocodingError) as e:
        print(e, file=sys.stderr)

    return 1


if __name__ == "__main__":
    sys.exit(main())
