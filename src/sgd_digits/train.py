"""Training entrypoint for sgd_digits.

Usage:
    python -m sgd_digits.train                                  # quadratic fit
    python -m sgd_digits.train trainer.learning_rate=1e-4       # watch it diverge
    python -m sgd_digits.train --config-name train_glyphs       # baseline + linear model
"""

import sys
from typing import Any

import hydra
import lightning as L
import torch
from loguru import logger
from omegaconf import DictConfig, OmegaConf

from sgd_digits.baseline import compute_class_mean, evaluate_baseline
from sgd_digits.config import (
    GlyphDataConfig,
    ModelForm,
    QuadraticDataConfig,
    TrainerConfig,
)
from sgd_digits.data.synthetic import make_glyph_stack, quadratic_samples
from sgd_digits.losses import build_loss_fn
from sgd_digits.models import build_model
from sgd_digits.report import baseline_table, loss_table, print_table
from sgd_digits.trainer import SGDTrainer, TrainingResult


def _section(cfg: DictConfig, key: str) -> dict[str, Any]:
    node = cfg.get(key)
    if node is None:
        return {}
    return OmegaConf.to_container(node, resolve=True)  # type: ignore[return-value]


def _glyph_split(
    data_cfg: GlyphDataConfig, num_samples: int, generator: torch.Generator
) -> tuple[torch.Tensor, torch.Tensor]:
    kwargs = {
        "size": data_cfg.size,
        "noise_std": data_cfg.noise_std,
        "max_shift": data_cfg.max_shift,
        "generator": generator,
    }
    return (
        make_glyph_stack(data_cfg.class_a, num_samples, **kwargs),
        make_glyph_stack(data_cfg.class_b, num_samples, **kwargs),
    )


def _stack_with_targets(
    stack_a: torch.Tensor, stack_b: torch.Tensor
) -> tuple[torch.Tensor, torch.Tensor]:
    """Join two class stacks along the sample axis; class_a -> 1.0, class_b -> 0.0."""
    inputs = torch.cat([stack_a, stack_b], dim=-1).to(torch.float64)
    targets = torch.cat(
        [
            torch.ones(stack_a.shape[-1], dtype=torch.float64),
            torch.zeros(stack_b.shape[-1], dtype=torch.float64),
        ]
    )
    return inputs, targets


def run_training(cfg: DictConfig) -> TrainingResult:
    """Build data, model and trainer from ``cfg`` and run to completion."""
    seed = int(cfg.get("seed", 42))
    L.seed_everything(seed, workers=True)
    generator = torch.Generator().manual_seed(seed)

    trainer_cfg = TrainerConfig(**_section(cfg, "trainer"))
    logger.info(
        f"Model form: {trainer_cfg.model_form.value}, loss: {trainer_cfg.loss_form.value}, "
        f"lr={trainer_cfg.learning_rate:g}, epochs={trainer_cfg.epochs}"
    )

    if trainer_cfg.model_form is ModelForm.QUADRATIC:
        data_cfg = QuadraticDataConfig(**_section(cfg, "quadratic"))
        inputs, targets = quadratic_samples(
            data_cfg.coefficients,
            t_start=data_cfg.t_start,
            t_stop=data_cfg.t_stop,
            noise_std=data_cfg.noise_std,
            generator=generator,
        )
        model = build_model(trainer_cfg.model_form)
        valid = None
    else:
        glyph_cfg = GlyphDataConfig(**_section(cfg, "glyphs"))
        train_a, train_b = _glyph_split(glyph_cfg, glyph_cfg.train_samples, generator)
        valid_a, valid_b = _glyph_split(glyph_cfg, glyph_cfg.valid_samples, generator)

        mean_a, mean_b = compute_class_mean(train_a), compute_class_mean(train_b)
        report = evaluate_baseline(
            valid_a, valid_b, mean_a, mean_b, glyph_cfg.class_a, glyph_cfg.class_b
        )
        print_table(baseline_table(report))

        inputs, targets = _stack_with_targets(train_a, train_b)
        valid = _stack_with_targets(valid_a, valid_b)
        model = build_model(trainer_cfg.model_form, (glyph_cfg.size, glyph_cfg.size))

    if trainer_cfg.param_init == "zeros":
        params = torch.zeros(model.num_params, dtype=torch.float64)
    else:
        params = model.init_params(generator=generator, dtype=torch.float64)

    trainer = SGDTrainer(
        params,
        predict_fn=model,
        loss_fn=build_loss_fn(trainer_cfg.loss_form),
        learning_rate=trainer_cfg.learning_rate,
        divergence_patience=trainer_cfg.divergence_patience,
    )
    result = trainer.fit(inputs, targets, trainer_cfg.epochs)
    print_table(loss_table(result, every=int(cfg.get("report_every", 1))))

    if valid is not None:
        valid_inputs, valid_targets = valid
        with torch.no_grad():
            predicted = model(result.params, valid_inputs) > 0.5
        valid_acc = (predicted == valid_targets.bool()).double().mean().item()
        logger.info(f"Linear-per-pixel validation accuracy: {valid_acc:.4f}")

    logger.info(f"Final parameters: {result.params.tolist()[:8]}")
    return result


@hydra.main(version_base=None, config_path="conf", config_name="train")
def main(cfg: DictConfig) -> None:
    """Run training with the given Hydra config."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.get("log_level", "INFO"))

    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")
    run_training(cfg)


if __name__ == "__main__":
    main()
