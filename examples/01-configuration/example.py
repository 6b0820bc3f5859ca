"""
Create a configuration, wait for its revision, then roll out a new image.

Requires a cluster with Knative Serving, and the test images pushed
with ``ko`` to ``$KO_DOCKER_REPO`` (``helloworld`` and ``pizzaplanetv2``).
"""
import asyncio
import sys

import kwait


async def rollout(name: str, image: str, new_image: str) -> str:
    settings = kwait.Settings()
    info = kwait.login_with_kubeconfig()
    async with kwait.APIContext(info) as context:
        client = kwait.ConfigurationsClient(context=context, settings=settings)

        names = kwait.ResourceNames(config=name, image=image)
        await kwait.create_configuration(client, names, kwait.with_config_label('example', '01'))
        names = kwait.ResourceNames(
            config=name,
            revision=await kwait.wait_for_config_latest_revision(client, names, settings=settings),
            image=image,
        )

        cfg = await client.get(name)
        await kwait.patch_config_image(client, cfg, kwait.image_path(new_image, settings=settings))
        return await kwait.wait_for_config_latest_revision(client, names, settings=settings)


def main() -> None:
    kwait.configure_logging(verbose=True, log_prefix=True)
    name, image, new_image = sys.argv[1:4]
    print(asyncio.run(rollout(name, image, new_image)))


if __name__ == '__main__':
    main()
