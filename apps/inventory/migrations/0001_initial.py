from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Medicine',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('category', models.CharField(max_length=64)),
                ('kind', models.CharField(choices=[('TABLET', 'Tablet family'), ('GENERIC', 'Generic')], max_length=16)),
                ('location', models.CharField(blank=True, max_length=120)),
                ('tablets_per_strip', models.PositiveIntegerField(blank=True, null=True)),
                ('description', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
                'indexes': [models.Index(fields=['name', 'category'], name='idx_medicine_name_cat')],
            },
        ),
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('batch_number', models.CharField(max_length=64)),
                ('mfg_date', models.DateField()),
                ('expiry_date', models.DateField()),
                ('price', models.DecimalField(decimal_places=2, max_digits=14)),
                ('purchase_price', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('stock_unit', models.CharField(choices=[('tablets', 'Tablets'), ('quantity', 'Units')], max_length=16)),
                ('stock', models.PositiveIntegerField(default=0)),
                ('position', models.PositiveIntegerField(default=0)),
                ('medicine', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batches', to='inventory.medicine')),
            ],
            options={
                'ordering': ['position'],
                'indexes': [
                    models.Index(fields=['batch_number'], name='idx_batch_number'),
                    models.Index(fields=['expiry_date'], name='idx_batch_expiry'),
                ],
            },
        ),
    ]
