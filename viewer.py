import argparse
import asyncio
import sys
from dataclasses import replace

from colorama import Fore, Style

from config import AppConfig, ConfigStore, QuantumNumbers, SampleRequest, load_config
from errors import OrbitalError, SamplingCancelled
from hydrogenHandler import save_orbital_cloud, show_orbital_cloud_pyvista
from logging_config import enable_file_logging, get_logger, parse_level, set_log_level
from progress import TqdmProgress
from service import OrbitalService

logger = get_logger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="atomcloud",
        description="Sample and display a hydrogen orbital as a point cloud coloured by phase.",
    )
    parser.add_argument("-n", type=int, help="principal quantum number")
    parser.add_argument("-l", type=int, help="azimuthal quantum number")
    parser.add_argument("-m", "--ml", type=int, dest="ml", help="magnetic quantum number")
    parser.add_argument("-s", "--samples", type=int, help="number of points to accept")
    parser.add_argument("--config", help="YAML file with quantum_numbers, sample_size and sampling sections")
    parser.add_argument("--seed", type=int)
    parser.add_argument("--batch-size", type=int)
    parser.add_argument("--max-attempts", type=int, help="give up after this many candidates")
    parser.add_argument("--timeout", type=float, help="give up after this many seconds")
    parser.add_argument("--clamp", action="store_true", help="clamp |psi|^2 > 1 instead of failing")
    parser.add_argument("--save", metavar="PATH", help="write the cloud to a JSON file")
    parser.add_argument("--no-show", action="store_true", help="skip the PyVista window")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", help="also log to this file at DEBUG level")
    return parser


def resolve_config(args):
    """Config file first, then command-line overrides."""
    config = load_config(args.config) if args.config else AppConfig()

    qn = config.request.quantum_numbers
    qn = QuantumNumbers(
        n=args.n if args.n is not None else qn.n,
        l=args.l if args.l is not None else qn.l,
        ml=args.ml if args.ml is not None else qn.ml,
    )
    sample_size = args.samples if args.samples is not None else config.request.sample_size

    sampling = config.sampling
    overrides = {
        "seed": args.seed,
        "batch_size": args.batch_size,
        "max_attempts": args.max_attempts,
        "timeout": args.timeout,
    }
    sampling = replace(sampling, **{k: v for k, v in overrides.items() if v is not None})
    if args.clamp:
        sampling = replace(sampling, clamp=True)

    return AppConfig(request=SampleRequest(qn, sample_size), sampling=sampling)


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.log_level:
        set_log_level(parse_level(args.log_level))
    if args.log_file:
        enable_file_logging(args.log_file)

    try:
        config = resolve_config(args)
        service = OrbitalService(ConfigStore(config.request), config.sampling)
        request = service.get_configuration()
        with TqdmProgress(desc="Sampling") as bar:
            samples = asyncio.run(service.calc(progress=bar))
    except KeyboardInterrupt:
        print(f"{Fore.YELLOW}Interrupted.{Style.RESET_ALL}")
        return 130
    except SamplingCancelled as exc:
        print(f"{Fore.YELLOW}{exc}{Style.RESET_ALL}")
        return 130
    except (OrbitalError, OSError, ValueError) as exc:
        print(f"{Fore.RED}Error: {exc}{Style.RESET_ALL}")
        return 1

    if args.save:
        save_orbital_cloud(samples, request, args.save)
    if not args.no_show:
        show_orbital_cloud_pyvista(samples, request)
    return 0


if __name__ == "__main__":
    sys.exit(main())
