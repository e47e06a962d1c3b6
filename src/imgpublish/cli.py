"""Command-line entry point.

Publishes one note of a vault directory::

    imgpublish publish notes/post.md --vault ~/vault \\
        --attachment-location assets --relative \\
        --account-id ... --bucket blog --path-template 'img/{year}/{filename}'

R2 credentials fall back to the ``IMGPUBLISH_R2_*`` environment
variables.  The published text is written to stdout; notices go to
stderr.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from imgpublish.backends.r2 import R2Backend
from imgpublish.config import PublishConfig, R2Config
from imgpublish.host import FileDocument, LocalVaultStorage, StreamClipboard
from imgpublish.models import Action
from imgpublish.observability import set_level
from imgpublish.processor import ImageTagProcessor


class ConsoleNotifier:
    """Echo notices to stderr."""

    def notify(self, message: str, duration_ms: int | None = None) -> None:
        click.echo(message, err=True)


async def _publish(
    vault: Path,
    note: str,
    publish_config: PublishConfig,
    r2_config: R2Config,
) -> int:
    async with R2Backend(r2_config) as backend:
        processor = ImageTagProcessor(
            document=FileDocument(vault, note),
            storage=LocalVaultStorage(vault),
            backend=backend,
            clipboard=StreamClipboard(),
            notifier=ConsoleNotifier(),
            config=publish_config,
        )
        result = await processor.process(Action.PUBLISH)
    return 1 if result is None else 0


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Emit structured debug logs on stderr.")
def main(verbose: bool) -> None:
    """Upload the local images of a note and publish the rewritten text."""
    if verbose:
        set_level(logging.DEBUG)


@main.command()
@click.argument("note")
@click.option(
    "--vault",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Vault directory NOTE and its attachments live in.",
)
@click.option("--attachment-location", default="/", show_default=True,
              help="Folder embed images (![[...]]) are stored in.")
@click.option("--relative/--no-relative", "use_relative_path", default=False,
              help="Resolve the attachment folder and links against the note's folder.")
@click.option("--alt-text/--no-alt-text", "image_alt_text", default=True,
              help="Derive alt text from image filenames.")
@click.option("--replace-original", is_flag=True,
              help="Write the rewritten text back into the note.")
@click.option("--ignore-properties", is_flag=True,
              help="Strip front matter from the published text.")
@click.option("--upload-timeout", type=float, default=None,
              help="Per-upload timeout in seconds.")
@click.option("--account-id", envvar="IMGPUBLISH_R2_ACCOUNT_ID", default="")
@click.option("--access-key-id", envvar="IMGPUBLISH_R2_ACCESS_KEY_ID", default="")
@click.option("--secret-access-key", envvar="IMGPUBLISH_R2_SECRET_ACCESS_KEY", default="")
@click.option("--bucket", "bucket_name", envvar="IMGPUBLISH_R2_BUCKET", default="")
@click.option("--path-template", envvar="IMGPUBLISH_R2_PATH", default="",
              help="Destination key template, e.g. 'img/{year}/{mon}/{filename}'.")
@click.option("--custom-domain", "custom_domain_name", envvar="IMGPUBLISH_R2_CUSTOM_DOMAIN",
              default="")
@click.option("--endpoint", envvar="IMGPUBLISH_R2_ENDPOINT", default="",
              help="S3 endpoint override.")
def publish(
    note: str,
    vault: Path,
    attachment_location: str,
    use_relative_path: bool,
    image_alt_text: bool,
    replace_original: bool,
    ignore_properties: bool,
    upload_timeout: float | None,
    account_id: str,
    access_key_id: str,
    secret_access_key: str,
    bucket_name: str,
    path_template: str,
    custom_domain_name: str,
    endpoint: str,
) -> None:
    """Publish NOTE (a path relative to the vault)."""
    try:
        publish_config = PublishConfig(
            attachment_location=attachment_location,
            use_relative_path=use_relative_path,
            image_alt_text=image_alt_text,
            replace_original_doc=replace_original,
            ignore_properties=ignore_properties,
            upload_timeout_seconds=upload_timeout,
        )
        r2_config = R2Config(
            account_id=account_id,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            bucket_name=bucket_name,
            path_template=path_template,
            custom_domain_name=custom_domain_name,
            endpoint=endpoint,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    exit_code = asyncio.run(_publish(vault, note, publish_config, r2_config))
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
